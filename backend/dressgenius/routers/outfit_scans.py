from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from dressgenius.database import get_db
from dressgenius.dependencies import get_chat_service, get_storage, get_vision_service
from dressgenius.models import User
from dressgenius.repositories import outfits as outfit_repo
from dressgenius.services.analysis import persist_detected_items, run_outfit_analysis
from dressgenius.services.serializers import serialize_detected_item, serialize_scan
from dressgenius.services.uploads import SCAN_EXTENSIONS, parse_intake, read_image
from dressgenius.utils.auth import get_current_user
from dressgenius.utils.gemini_chat import GeminiChatService
from dressgenius.utils.gemini_vision import GeminiVisionService
from dressgenius.utils.storage import Storage

router = APIRouter(prefix="/outfit-scans", tags=["Outfit Scans"])


@router.get("")
def list_scans(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """Newest 50 scans of the current user"""
    scans = outfit_repo.list_scans(db, current_user.id)
    return {"scans": [serialize_scan(s, storage) for s in scans]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_scan(
    image: UploadFile = File(...),
    intake: Optional[str] = Form(None, description="JSON object: occasion, weather, dress_code, budget, desired_vibe"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    vision_service: GeminiVisionService = Depends(get_vision_service),
    chat_service: GeminiChatService = Depends(get_chat_service),
):
    """
    Analyze a single outfit photo.

    Runs the vision call and heuristic scoring, stores the scan and the
    detected garments, and returns them with the audit process id.
    """
    intake_data = parse_intake(intake)
    data, mime_type = read_image(image, SCAN_EXTENSIONS)
    path = storage.store(data, f"outfit-scans/{current_user.id}", mime_type, image.filename)

    process, vision, analysis = run_outfit_analysis(
        db, current_user, "scan_analyze", data, mime_type, path, intake_data, vision_service, chat_service,
    )

    scan = outfit_repo.create_scan(db, current_user.id, path, vision, analysis)
    detected = persist_detected_items(db, current_user.id, "scan", scan.id, process.id, vision, path)
    outfit_repo.complete_process(db, process, scan_id=scan.id)
    db.commit()
    db.refresh(scan)

    return {
        "scan": serialize_scan(scan, storage),
        "detected_items": [serialize_detected_item(d) for d in detected],
        "process_id": process.id,
    }


@router.get("/{scan_id}")
def get_scan(
    scan_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    scan = outfit_repo.find_scan(db, scan_id, current_user.id)
    detected = outfit_repo.list_detected_items(db, "scan", scan.id)
    return {
        "scan": {
            **serialize_scan(scan, storage),
            "detected_items": [serialize_detected_item(d) for d in detected],
        }
    }
