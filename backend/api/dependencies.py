"""FastAPI dependency providers for the agent services."""

from fastapi import Depends

from backend.agent import EventStreamBridge, MessageRelay, SessionCoordinator, SessionTerminator
from backend.agent.relay import SequenceClock
from backend.config import Settings, settings
from backend.crm import CRMClient, get_crm_client

_sequence = SequenceClock()


def get_settings() -> Settings:
    return settings


def get_session_coordinator(
    crm: CRMClient = Depends(get_crm_client),
    config: Settings = Depends(get_settings),
) -> SessionCoordinator:
    return SessionCoordinator(crm, config)


def get_message_relay(
    crm: CRMClient = Depends(get_crm_client),
    config: Settings = Depends(get_settings),
) -> MessageRelay:
    return MessageRelay(crm, config, sequence=_sequence)


def get_session_terminator(
    crm: CRMClient = Depends(get_crm_client),
    config: Settings = Depends(get_settings),
) -> SessionTerminator:
    return SessionTerminator(crm, config)


def get_event_bridge(crm: CRMClient = Depends(get_crm_client)) -> EventStreamBridge:
    return EventStreamBridge(crm)
