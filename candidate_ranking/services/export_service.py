# candidate_ranking/services/export_service.py
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from candidate_ranking.schemas.candidate import Category, RestoreRecord
from candidate_ranking.services.logger import AppLogger

logger = AppLogger.get_logger(__name__)

CSV_HEADER = "Region,Name,Score,Category,Timestamp\n"


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def to_json(candidates: List[Dict[str, Any]]) -> str:
    return json.dumps(candidates, indent=2, ensure_ascii=False)


def _format_score(score) -> str:
    if isinstance(score, float) and score.is_integer():
        return str(int(score))
    return "" if score is None else str(score)


def to_csv(candidates: List[Dict[str, Any]]) -> str:
    """Render candidates as CSV.

    Only the name column is quoted. Commas or quotes inside the other
    columns are written as-is.
    """
    rows = [CSV_HEADER]
    for candidate in candidates:
        rows.append(
            f'{candidate.get("region", "")},"{candidate.get("nome", "")}",'
            f'{_format_score(candidate.get("pontuacao"))},'
            f'{Category.label_for(candidate.get("tipo"))},{candidate.get("timestamp", "")}\n'
        )
    return "".join(rows)


def parse_restore_payload(payload) -> Optional[List[Any]]:
    """Decode a backup payload into a list of raw records, or None if it is not one"""
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Restore payload is not valid JSON: {e}")
            return None

    if not isinstance(payload, list):
        logger.error("Invalid restore payload: expected a list of candidates")
        return None
    return payload


def build_restore_documents(records: List[Any]) -> List[Dict[str, Any]]:
    """Turn raw backup records into documents, skipping the ones missing required fields"""
    documents = []
    for raw in records:
        if not isinstance(raw, dict):
            logger.warning(f"Skipping invalid candidate in restore payload: {raw!r}")
            continue
        try:
            record = RestoreRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Skipping invalid candidate in restore payload: {raw} ({e.error_count()} errors)")
            continue

        documents.append({
            "nome": record.name,
            "pontuacao": record.score,
            "tipo": record.category,
            "region": record.region,
            "timestamp": record.timestamp or utc_timestamp(),
        })
    return documents
