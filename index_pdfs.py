# index_pdfs.py
"""
Build the embeddings collection the API loads at startup.

    python index_pdfs.py [--pdf-dir data/pdfs] [--out data/embeddings.json]
"""
import argparse
from config.settings import settings
from core.embedder import embed_texts
from core.indexer import build_records, write_records
from util.logger import init_logger


def main() -> None:
    parser = argparse.ArgumentParser(description="Chunk and embed policy PDFs.")
    parser.add_argument("--pdf-dir", default=settings.PDF_DIR)
    parser.add_argument("--out", default=settings.EMBEDDINGS_FILE)
    args = parser.parse_args()

    logger = init_logger()
    records = build_records(
        args.pdf_dir,
        embed_texts,
        chunk_size=settings.CHUNK_WORDS,
        overlap=settings.CHUNK_OVERLAP_WORDS,
    )
    write_records(records, args.out)
    logger.info("index.done records=%d", len(records))


if __name__ == "__main__":
    main()
