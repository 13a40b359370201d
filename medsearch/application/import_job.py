# medsearch/application/import_job.py
"""
One-shot CSV import: stream rows → normalize → batched upsert keyed by officialName.

    python -m medsearch.application.import_job data/A_Z_medicines_dataset_of_India.csv

Re-running is safe (upserts never duplicate a name). A crash mid-file leaves
the batches already written in place; just run it again.
"""
from __future__ import annotations

import asyncio
import csv
import logging
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
load_dotenv()

from medsearch import config
from medsearch.domain.models import Medicine
from medsearch.domain.normalizer import Rejected, normalize
from medsearch.domain.ports import MedicineStorePort

logger = logging.getLogger("medsearch.import")


@dataclass
class ImportReport:
    imported: int = 0
    rejected: int = 0


async def run_import(csv_path: str | Path, store: MedicineStorePort,
                     batch_size: int = config.IMPORT_BATCH) -> ImportReport:
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV not found at {path}")

    await store.ensure_indexes()
    report = ImportReport()
    batch: List[Medicine] = []

    with path.open(newline="", encoding="utf-8") as f:
        for i, row in enumerate(csv.DictReader(f)):
            res = normalize(row, row_index=i)
            if isinstance(res, Rejected):
                report.rejected += 1
                logger.debug("row %d rejected: %s", i, res.reason)
                continue
            batch.append(res)
            if len(batch) >= batch_size:
                report.imported += await store.upsert_many(batch)
                batch.clear()

    if batch:
        report.imported += await store.upsert_many(batch)

    logger.info("import done: %s imported=%d rejected=%d", path, report.imported, report.rejected)
    return report


def spawn_import(csv_path: str | Path) -> int:
    """Start the import in a detached child process and return its pid (fire-and-forget)."""
    proc = subprocess.Popen(
        [sys.executable, "-m", "medsearch.application.import_job", str(csv_path)],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )
    logger.info("import spawned pid=%d csv=%s", proc.pid, csv_path)
    return proc.pid


async def _run_cli(csv_path: str) -> ImportReport:
    from medsearch.infra.repo.mongo_repo import MongoMedicineRepo
    return await run_import(csv_path, MongoMedicineRepo())


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = sys.argv[1:] if argv is None else argv
    if not args:
        logger.error("usage: python -m medsearch.application.import_job <csv-path>")
        return 1
    report = asyncio.run(_run_cli(args[0]))
    print(f"Imported {report.imported} records ({report.rejected} rejected)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
