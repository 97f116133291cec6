"""
MongoDB Data Population Script for the Ambulance Waiting List service.

Seeds sample ambulances (with predefined conditions and a few waiting
patients) through the same document store the API uses.

Usage:
    python scripts/populate_mongodb.py [--since 2024-05-01T08:00:00Z] [--replace]

Environment:
    AMBULANCE_API_MONGODB_* - see shared/mongo_config.py
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.data import BackendError, ConflictError
from core.domain import parse_date
from core.mongo_store import MongoDocumentStore
from shared.mongo_config import MongoServiceConfig
from use_cases.ambulance import Ambulance, Condition, WaitingListEntry, reconcile_waiting_list

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logging.getLogger("pymongo").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


# =============================================================================
# SAMPLE DATA
# =============================================================================

CONDITIONS = [
    Condition(code="subfebrilia", value="Teploty", typical_duration_minutes=20,
              reference="https://zdravoteka.sk/priznaky/zvysena-telesna-teplota/"),
    Condition(code="nausea", value="Nevoľnosť", typical_duration_minutes=45,
              reference="https://zdravoteka.sk/priznaky/nevolnost/"),
    Condition(code="followup", value="Kontrola", typical_duration_minutes=15),
    Condition(code="ba-extract", value="Odber krvi", typical_duration_minutes=10),
]


def prepare_waiting_list(since: datetime) -> List[WaitingListEntry]:
    """Three patients who arrived ten minutes apart."""
    patients = [
        ("Jožko Púčik", "10001", "subfebrilia"),
        ("Bc. August Cézar", "10096", "nausea"),
        ("Ing. Ferdinand Trety", "10028", "followup"),
    ]
    entries = []
    for i, (name, patient_id, code) in enumerate(patients):
        condition = next(c for c in CONDITIONS if c.code == code)
        entries.append(WaitingListEntry(
            id=f"entry-{i + 1}",
            name=name,
            patient_id=patient_id,
            waiting_since=since + timedelta(minutes=10 * i),
            estimated_duration_minutes=condition.typical_duration_minutes,
            condition_code=code,
        ))
    return entries


def prepare_ambulances(since: datetime) -> List[Ambulance]:
    """Sample ambulances; waiting lists are reconciled before they are stored."""
    ambulances = [
        Ambulance(
            id="bobulova",
            name="Dr. Bobulová",
            room_number="356 - 3.posch",
            waiting_list=prepare_waiting_list(since),
            predefined_conditions=list(CONDITIONS),
        ),
        Ambulance(
            id="novak",
            name="MUDr. Novák",
            room_number="112 - prízemie",
            predefined_conditions=list(CONDITIONS),
        ),
    ]
    for ambulance in ambulances:
        if ambulance.waiting_list:
            reconcile_waiting_list(ambulance.waiting_list)
    return ambulances


# =============================================================================
# MONGODB OPERATIONS
# =============================================================================

def store_ambulances(store: MongoDocumentStore, ambulances: List[Ambulance], replace: bool) -> int:
    """Create each ambulance; existing ones are skipped or replaced."""
    count = 0
    for ambulance in ambulances:
        try:
            store.create(ambulance.id, ambulance)
            count += 1
        except ConflictError:
            if not replace:
                logger.info(f"  {ambulance.id}: already exists, skipped")
                continue
            store.update(ambulance.id, ambulance)
            count += 1
            logger.info(f"  {ambulance.id}: replaced")
    return count


def main():
    """Main function to populate MongoDB with sample ambulances."""
    parser = argparse.ArgumentParser(description="Seed sample ambulances into MongoDB")
    parser.add_argument("--since", help="ISO timestamp the first sample patient arrived (default: now)")
    parser.add_argument("--replace", action="store_true", help="Overwrite ambulances that already exist")
    args = parser.parse_args()

    since = datetime.now(timezone.utc)
    if args.since:
        since = parse_date(args.since)
        if since is None:
            parser.error(f"cannot parse --since value {args.since!r}")

    config = MongoServiceConfig()
    logger.info("=" * 60)
    logger.info("Ambulance Waiting List - MongoDB Population Script")
    logger.info("=" * 60)
    logger.info(f"Target: {config.describe()}")
    logger.info("=" * 60)

    store = MongoDocumentStore(Ambulance, config)
    try:
        count = store_ambulances(store, prepare_ambulances(since), args.replace)
    except BackendError as e:
        logger.error(f"Failed to populate MongoDB: {e}")
        sys.exit(1)
    finally:
        store.disconnect()

    logger.info(f"COMPLETE: {count} ambulances stored")


if __name__ == "__main__":
    main()
