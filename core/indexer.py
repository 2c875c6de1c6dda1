# core/indexer.py
import json
import os
from typing import Callable, List, Sequence
import numpy as np
from core.pdf_text import chunk_words, extract_pdf_text
from util.timing import timed
import logging

logger = logging.getLogger(__name__)

EmbedBatchFn = Callable[[Sequence[str]], np.ndarray]


def list_pdfs(pdf_dir: str) -> List[str]:
    return sorted(f for f in os.listdir(pdf_dir) if f.lower().endswith(".pdf"))


def build_records(
    pdf_dir: str,
    embed_batch: EmbedBatchFn,
    *,
    chunk_size: int = 500,
    overlap: int = 50,
) -> List[dict]:
    """
    Chunk and embed every PDF in `pdf_dir`.
    Each record is {dataset: <file>, id: "<file>::<n>" (1-based), text, embedding}.
    """
    records: List[dict] = []
    for name in list_pdfs(pdf_dir):
        with open(os.path.join(pdf_dir, name), "rb") as fh:
            text = extract_pdf_text(fh.read())
        chunks = chunk_words(text, chunk_size, overlap)
        if not chunks:
            logger.warning("index.pdf.empty file=%s", name)
            continue
        with timed(logger, "index.pdf", file=name, chunks=len(chunks)):
            vectors = embed_batch(chunks)
        for i, (chunk, vec) in enumerate(zip(chunks, vectors), start=1):
            records.append(
                {
                    "dataset": name,
                    "id": f"{name}::{i}",
                    "text": chunk,
                    "embedding": [float(x) for x in vec],
                }
            )
    return records


def write_records(records: Sequence[dict], out_file: str) -> None:
    parent = os.path.dirname(out_file)
    if parent:
        os.makedirs(parent, exist_ok=True)
    tmp = f"{out_file}.tmp"
    with open(tmp, "w", encoding="utf-8") as fh:
        json.dump(list(records), fh)
    os.replace(tmp, out_file)
    logger.info("index.saved records=%d path=%s", len(records), out_file)
