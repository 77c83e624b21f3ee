import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional
from loguru import logger

from listing_stats import config
from listing_stats.schemas import AggregateSummary, ExtractionResult


def write_snapshot(
    result: ExtractionResult,
    summary: Dict[str, AggregateSummary],
    out_dir: Optional[str] = None,
    *,
    source_url: str = "",
) -> Path:
    """Dump one extraction pass and its summary to a timestamped JSON file."""
    out = Path(out_dir or config.RESULTS_DIR)
    out.mkdir(parents=True, exist_ok=True)

    now = datetime.now(timezone.utc)
    path = out / f"listings_{now.strftime('%Y%m%dT%H%M%S%fZ')}.json"
    payload = {
        "timestamp": now.isoformat(),
        "url": source_url,
        "articles_count": result.articles_count,
        "reported_count": result.reported_count,
        "listings": [r.model_dump() for r in result.listings],
        "summary": {k: s.display() for k, s in summary.items()},
    }
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info(f"Snapshot with {len(result.listings)} listings saved to {path}")
    return path
