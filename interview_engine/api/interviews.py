"""
Interview API endpoints.

REST endpoints for creating and driving interview sessions, plus a
WebSocket channel that delivers one interviewer reply per candidate
message, in order.
"""
import base64
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from interview_engine.core.config import get_settings
from interview_engine.core.exceptions import (
    DuplicateSessionError,
    SessionNotFoundError,
    VoiceSynthesisError,
)
from interview_engine.models.interview import (
    InitializeInterviewRequest,
    InitializeInterviewResponse,
    InteractRequest,
    InteractResponse,
    InterviewSession,
    InterviewSummary,
    SessionStatus,
)
from interview_engine.providers.tts import VoiceSynthesizer, get_voice_synthesizer
from interview_engine.services.evaluation import EvaluationReport, Evaluator, get_transcript_evaluator
from interview_engine.services.interview_orchestrator import (
    InterviewOrchestrator,
    get_interview_orchestrator,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def get_evaluator() -> Evaluator:
    return get_transcript_evaluator()


def get_optional_voice_synthesizer() -> Optional[VoiceSynthesizer]:
    """Voice synthesizer, or None when the voice pipeline is disabled."""
    if not get_settings().enable_voice_pipeline:
        return None
    return get_voice_synthesizer()


async def _synthesize_audio(synthesizer: Optional[VoiceSynthesizer], text: str) -> Optional[str]:
    """Base64 audio for `text`, or None if voice is off or synthesis failed."""
    if synthesizer is None:
        return None
    try:
        result = await synthesizer.synthesize(text)
    except VoiceSynthesisError as e:
        logger.warning(f"Voice synthesis failed, answering text-only: {e}")
        return None
    return base64.b64encode(result.audio_data).decode("ascii")


@router.post("/", response_model=InitializeInterviewResponse)
async def initialize_interview(
    request: InitializeInterviewRequest,
    orchestrator: InterviewOrchestrator = Depends(get_interview_orchestrator),
):
    """
    Create a new interview session.

    When `question_list` is empty the role's default questions are used.
    The ice-breaker and closing question are added around the list.
    """
    try:
        session = orchestrator.initialize_interview(request.session_id, request)
    except DuplicateSessionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return InitializeInterviewResponse(
        session_id=session.id,
        phase=session.current_phase,
        total_questions=len(session.question_list),
        message="Interview initialized. Send an interaction to receive the greeting.",
    )


@router.get("/", response_model=List[InterviewSession])
async def list_interviews(
    session_status: Optional[SessionStatus] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    orchestrator: InterviewOrchestrator = Depends(get_interview_orchestrator),
):
    """List sessions, most recently active first."""
    return orchestrator.list_sessions(status=session_status, limit=limit)


@router.post("/{session_id}/interact", response_model=InteractResponse)
async def interact(
    session_id: str,
    request: InteractRequest,
    orchestrator: InterviewOrchestrator = Depends(get_interview_orchestrator),
    synthesizer: Optional[VoiceSynthesizer] = Depends(get_optional_voice_synthesizer),
):
    """
    Send one candidate utterance and receive the interviewer's reply.

    Send `utterance: null` to have the interviewer speak first (greeting)
    or repeat the current question.
    """
    try:
        descriptor = await orchestrator.handle_interaction(session_id, request.utterance)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    audio = None
    if request.synthesize_audio:
        audio = await _synthesize_audio(synthesizer, descriptor.text)

    return InteractResponse(session_id=session_id, response=descriptor, audio_base64=audio)


@router.get("/{session_id}", response_model=InterviewSession)
async def get_interview(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_interview_orchestrator),
):
    """Get the full session state."""
    try:
        return orchestrator.get_session(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{session_id}/summary", response_model=InterviewSummary)
async def get_interview_summary(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_interview_orchestrator),
):
    """Get the interview summary (responses, completion rate, history)."""
    try:
        return orchestrator.get_interview_summary(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{session_id}/evaluate", response_model=EvaluationReport)
async def evaluate_interview(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_interview_orchestrator),
    evaluator: Evaluator = Depends(get_evaluator),
):
    """
    Evaluate a completed interview.

    Only completed sessions can be evaluated.
    """
    try:
        session = orchestrator.get_session(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    if session.status != SessionStatus.COMPLETED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Interview is not completed (phase: {session.current_phase.value})",
        )

    summary = orchestrator.get_interview_summary(session_id)
    report = await evaluator.evaluate(summary)
    logger.info(f"Interview {session_id} evaluated: fit={report.fit_score} ({report.recommendation.value})")
    return report


@router.delete("/{session_id}")
async def delete_interview(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_interview_orchestrator),
):
    """Delete an interview session."""
    if not orchestrator.delete_session(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session not found: {session_id}")
    return {"message": "Session deleted", "session_id": session_id}


@router.websocket("/ws/{session_id}")
async def interview_websocket(
    websocket: WebSocket,
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_interview_orchestrator),
    synthesizer: Optional[VoiceSynthesizer] = Depends(get_optional_voice_synthesizer),
):
    """
    Duplex interview channel.

    Each JSON message `{"utterance": ..., "synthesize_audio": false}` is
    answered with one `InteractResponse` payload. Malformed messages get an
    `{"error": ...}` reply and the connection stays open.
    """
    await websocket.accept()

    try:
        orchestrator.get_session(session_id)
    except SessionNotFoundError as e:
        await websocket.send_json({"error": str(e)})
        await websocket.close(code=4404)
        return

    try:
        while True:
            data = await websocket.receive_text()
            try:
                request = InteractRequest.model_validate_json(data)
            except ValidationError as e:
                await websocket.send_json({"error": f"Invalid message: {e.errors()[0]['msg']}"})
                continue

            try:
                descriptor = await orchestrator.handle_interaction(session_id, request.utterance)
            except SessionNotFoundError as e:
                await websocket.send_json({"error": str(e)})
                await websocket.close(code=4404)
                return

            audio = None
            if request.synthesize_audio:
                audio = await _synthesize_audio(synthesizer, descriptor.text)

            response = InteractResponse(session_id=session_id, response=descriptor, audio_base64=audio)
            await websocket.send_json(response.model_dump(mode="json"))
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for session {session_id}")
