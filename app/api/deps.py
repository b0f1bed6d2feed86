from fastapi import Depends, Request
from sqlmodel import Session

from app.core.database import get_db
from app.services.completion import CompletionClient
from app.services.persistence import RecordGateway
from app.services.storage import LocalStorage


def get_storage(request: Request) -> LocalStorage:
    return request.app.state.storage


def get_completion_client(request: Request) -> CompletionClient:
    return request.app.state.completion_client


def get_record_gateway(db: Session = Depends(get_db)) -> RecordGateway:
    return RecordGateway(db)
