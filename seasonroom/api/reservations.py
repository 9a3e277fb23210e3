"""Reservation endpoints."""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Body, Depends, Response

from seasonroom.deps import get_session, to_http_error
from seasonroom.schemas.calendar import CommandResultView, CrewDayDetailView, SelectionView
from seasonroom.schemas.reservation import GuestInfo
from seasonroom.services.calendar_view import crew_day_view
from seasonroom.services.crew_session import CrewSession
from seasonroom.services.reservation_commands import CommandResult, ReservationCommandFlow

router = APIRouter(prefix="/reservations", tags=["reservations"])


def _selection_view(flow: ReservationCommandFlow, day: date) -> SelectionView:
    return SelectionView(date=day, phase=flow.phase(day).value, selected=flow.selected)


def _result_view(result: CommandResult, response: Response) -> CommandResultView:
    if not result.ok:
        response.status_code = 502
    return CommandResultView(
        action=result.action,
        ok=result.ok,
        dates=result.dates,
        message=result.message,
    )


async def _flow_for(session: CrewSession, day: date) -> ReservationCommandFlow:
    flow = await session.get_flow()
    if not flow.is_month_loaded(day):
        await flow.load_month(day.year, day.month)
    return flow


@router.post("/selection/{day}", response_model=SelectionView)
async def toggle_selection(day: date, session: CrewSession = Depends(get_session)):
    """
    Select or deselect a day for the next reservation request.

    Only days that are open for reservation and not already reserved can
    be selected.
    """
    try:
        flow = await _flow_for(session, day)
        flow.select(day)
        return _selection_view(flow, day)
    except Exception as e:
        raise to_http_error(e)


@router.delete("/selection", status_code=204)
async def clear_selection(session: CrewSession = Depends(get_session)):
    """Drop every selected day."""
    try:
        flow = await session.get_flow()
        flow.clear_selection()
    except Exception as e:
        raise to_http_error(e)


@router.post("/submit", response_model=CommandResultView)
async def submit_selection(
    response: Response,
    guest: Optional[GuestInfo] = Body(default=None),
    session: CrewSession = Depends(get_session),
):
    """
    Reserve every selected day in one request.

    On failure the selection is kept so the user can try again.

    Args:
        response: Outgoing response, set to 502 when the backend rejects the request
        guest: Guest to reserve for, omitted for the user themselves
        session: Current crew session

    Returns:
        Outcome of the request
    """
    try:
        flow = await session.get_flow()
        result = await flow.submit(guest)
    except Exception as e:
        raise to_http_error(e)
    return _result_view(result, response)


@router.post("/{day}/cancel", response_model=SelectionView)
async def request_cancel(day: date, session: CrewSession = Depends(get_session)):
    """Ask for confirmation before cancelling the reservation on ``day``."""
    try:
        flow = await _flow_for(session, day)
        flow.request_cancel(day)
        return _selection_view(flow, day)
    except Exception as e:
        raise to_http_error(e)


@router.delete("/{day}/cancel", response_model=SelectionView)
async def abort_cancel(day: date, session: CrewSession = Depends(get_session)):
    """Keep the reservation after all."""
    try:
        flow = await _flow_for(session, day)
        flow.abort_cancel(day)
        return _selection_view(flow, day)
    except Exception as e:
        raise to_http_error(e)


@router.post("/{day}/cancel/confirm", response_model=CommandResultView)
async def confirm_cancel(
    day: date,
    response: Response,
    session: CrewSession = Depends(get_session),
):
    """Cancel the reservation on ``day``."""
    try:
        flow = await _flow_for(session, day)
        result = await flow.confirm_cancel(day)
    except Exception as e:
        raise to_http_error(e)
    return _result_view(result, response)


@router.post("/{day}/teaching", response_model=CommandResultView)
async def toggle_teaching(
    day: date,
    response: Response,
    session: CrewSession = Depends(get_session),
):
    """Apply for, or withdraw from, teaching on a confirmed reservation."""
    try:
        flow = await _flow_for(session, day)
        result = await flow.toggle_teaching(day)
    except Exception as e:
        raise to_http_error(e)
    return _result_view(result, response)


@router.get("/{day}/detail", response_model=CrewDayDetailView)
async def get_day_detail(day: date, session: CrewSession = Depends(get_session)):
    """
    Get crew-wide detail of one day.

    Returns:
        Headcount, occupancy level and the members coming that day
    """
    try:
        crew = await session.get_crew()
        detail = await session.client.get_reservation_detail(crew.crew_id, day)
        return crew_day_view(crew, detail)
    except Exception as e:
        raise to_http_error(e)
