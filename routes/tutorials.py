from flask import Blueprint, request, jsonify, g

from datastore import get_datastore
from domain import Difficulty, Tutorial, TutorialLesson, UserRole
from security.rbac import require_roles
from services.errors import NotFoundError, ValidationError
from services.progress import TutorialProgressTracker
from utils.auth_context import current_user_id, login_required
from utils.audit import log_event
from utils.serialize import parse_int, to_json, to_json_list

tutorial_bp = Blueprint("tutorial", __name__, url_prefix="/tutorials")


def _progress_payload(tracker):
    return {
        "progress": to_json(tracker.progress),
        "current_lesson": to_json(tracker.current_lesson),
        "current_index": tracker.current_index,
        "total_lessons": len(tracker.lessons),
    }


@tutorial_bp.get("")
def list_tutorials():
    filters = {
        "sport_category": request.args.get("sport_category"),
        "difficulty": request.args.get("difficulty"),
    }
    return jsonify(to_json_list(get_datastore().list_tutorials(filters))), 200


@tutorial_bp.get("/<int:tutorial_id>")
def get_tutorial(tutorial_id: int):
    store = get_datastore()
    tutorial = store.get_tutorial(tutorial_id)
    if not tutorial:
        return jsonify(error="Tutorial not found"), 404
    payload = to_json(tutorial)
    payload["lessons"] = to_json_list(store.list_lessons(tutorial_id))
    return jsonify(payload), 200


# ---------- ADMIN: catalogue ----------
@tutorial_bp.post("")
@require_roles(UserRole.ADMIN)
def create_tutorial():
    data = request.get_json(silent=True) or {}
    title = (data.get("title") or "").strip()
    sport_category = (data.get("sport_category") or "").strip()
    difficulty = (data.get("difficulty") or Difficulty.BEGINNER).strip().lower()
    if not title or not sport_category:
        return jsonify(error="title and sport_category are required"), 400
    if difficulty not in Difficulty.ALL:
        return jsonify(error=f"difficulty must be one of {', '.join(Difficulty.ALL)}"), 400

    tutorial = get_datastore().create_tutorial(Tutorial(
        title=title,
        sport_category=sport_category,
        difficulty=difficulty,
        description=data.get("description"),
        instructor_id=g.user.id,
        video_url=data.get("video_url"),
        thumbnail=data.get("thumbnail"),
        duration=parse_int(data.get("duration"), "duration", required=False, minimum=0),
        is_premium=bool(data.get("is_premium", False)),
    ))
    log_event("TUTORIAL_CREATE", user_id=g.user.id, entity="tutorial", entity_id=tutorial.id)
    return jsonify(to_json(tutorial)), 201


@tutorial_bp.post("/<int:tutorial_id>/lessons")
@require_roles(UserRole.ADMIN)
def add_lesson(tutorial_id: int):
    data = request.get_json(silent=True) or {}
    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("title is required")

    lesson = get_datastore().add_lesson(TutorialLesson(
        tutorial_id=tutorial_id,
        title=title,
        sequence_order=parse_int(data.get("sequence_order"), "sequence_order", minimum=1),
        description=data.get("description"),
        video_url=data.get("video_url"),
        duration=parse_int(data.get("duration"), "duration", required=False, minimum=0),
    ))
    log_event("TUTORIAL_LESSON_ADD", user_id=g.user.id, entity="tutorial", entity_id=tutorial_id,
              metadata={"lesson_id": lesson.id})
    return jsonify(to_json(lesson)), 201


# ---------- LEARNERS: progress ----------
@tutorial_bp.get("/<int:tutorial_id>/progress")
def get_progress(tutorial_id: int):
    tracker = TutorialProgressTracker(get_datastore(), tutorial_id, current_user_id()).load()
    return jsonify(_progress_payload(tracker)), 200


def _step(tutorial_id, action, move):
    tracker = TutorialProgressTracker(get_datastore(), tutorial_id, g.user.id).load()
    move(tracker)
    log_event("PROGRESS_UPDATE", user_id=g.user.id, entity="tutorial", entity_id=tutorial_id,
              metadata={"action": action, "progress": tracker.progress.progress,
                        "completed_lessons": tracker.progress.completed_lessons})
    return jsonify(_progress_payload(tracker)), 200


def _lesson_id_from_body():
    data = request.get_json(silent=True) or {}
    return parse_int(data.get("lesson_id"), "lesson_id")


@tutorial_bp.post("/<int:tutorial_id>/progress/complete")
@login_required
def complete_lesson(tutorial_id: int):
    lesson_id = _lesson_id_from_body()
    return _step(tutorial_id, "complete", lambda t: t.mark_lesson_complete(lesson_id))


@tutorial_bp.post("/<int:tutorial_id>/progress/next")
@login_required
def next_lesson(tutorial_id: int):
    return _step(tutorial_id, "next", lambda t: t.move_to_next_lesson())


@tutorial_bp.post("/<int:tutorial_id>/progress/previous")
@login_required
def previous_lesson(tutorial_id: int):
    return _step(tutorial_id, "previous", lambda t: t.move_to_previous_lesson())


@tutorial_bp.post("/<int:tutorial_id>/progress/goto")
@login_required
def goto_lesson(tutorial_id: int):
    lesson_id = _lesson_id_from_body()
    return _step(tutorial_id, "goto", lambda t: t.move_to_lesson(lesson_id))
