"""
Outfit scans, analysis processes and detected items, always scoped by owner.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from dressgenius.core.exceptions import NotFoundError
from dressgenius.models import OutfitScan, OutfitAnalysisProcess, OutfitDetectedItem


def create_process(db: Session, user_id: int, kind: str, image_path: str, intake: dict, ai_preferences: dict) -> OutfitAnalysisProcess:
    process = OutfitAnalysisProcess(
        user_id=user_id,
        kind=kind,
        status="processing",
        image_path=image_path,
        intake=intake,
        ai_preferences=ai_preferences,
        started_at=datetime.utcnow(),
    )
    db.add(process)
    db.commit()
    db.refresh(process)
    return process


def complete_process(db: Session, process: OutfitAnalysisProcess, **links) -> OutfitAnalysisProcess:
    for key, value in links.items():
        setattr(process, key, value)
    process.status = "completed"
    process.completed_at = datetime.utcnow()
    return process


def fail_process(db: Session, process: OutfitAnalysisProcess, error_status: int, error_message: str) -> None:
    process.status = "failed"
    process.error_status = error_status
    process.error_message = error_message
    process.completed_at = datetime.utcnow()
    db.commit()


def create_scan(db: Session, user_id: int, image_path: str, vision: dict, analysis: dict) -> OutfitScan:
    scan = OutfitScan(
        user_id=user_id,
        image_path=image_path,
        vision=vision,
        analysis=analysis,
        score=analysis.get("score"),
    )
    db.add(scan)
    db.flush()
    return scan


def find_scan(db: Session, scan_id: int, user_id: int) -> OutfitScan:
    scan = db.query(OutfitScan).filter(OutfitScan.id == scan_id, OutfitScan.user_id == user_id).first()
    if scan is None:
        raise NotFoundError()
    return scan


def list_scans(db: Session, user_id: int, limit: int = 50) -> List[OutfitScan]:
    return (
        db.query(OutfitScan)
        .filter(OutfitScan.user_id == user_id)
        .order_by(OutfitScan.id.desc())
        .limit(limit)
        .all()
    )


def find_detected_item(db: Session, item_id: int, user_id: int) -> Optional[OutfitDetectedItem]:
    return (
        db.query(OutfitDetectedItem)
        .filter(OutfitDetectedItem.id == item_id, OutfitDetectedItem.user_id == user_id)
        .first()
    )


def list_detected_items(db: Session, source_type: str, source_id: int) -> List[OutfitDetectedItem]:
    return (
        db.query(OutfitDetectedItem)
        .filter(OutfitDetectedItem.source_type == source_type, OutfitDetectedItem.source_id == source_id)
        .order_by(OutfitDetectedItem.id)
        .all()
    )
