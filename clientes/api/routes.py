from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Union
from clientes.infrastructure.guard import ConnectionGuard, UNAVAILABLE, get_guard
from clientes.application.service import ClienteService
from clientes.application.results import Authenticated, DATABASE_UNAVAILABLE, Failure, Registered
from clientes.application.schemas import (
    ApiResponse,
    ClienteCreate,
    ClienteRead,
    ClienteSummary,
    LoginRequest,
    LoginResponse,
)

router = APIRouter(tags=["clientes"])

FAILURE_RESPONSES = {
    409: {"model": ApiResponse, "description": "Email or taxId already registered"},
    500: {"model": ApiResponse, "description": "Database error"},
    503: {"model": ApiResponse, "description": "Database unavailable"},
}

def failure_response(failure: Failure) -> JSONResponse:
    body = ApiResponse(success=False, message=failure.message)
    return JSONResponse(status_code=failure.status_code, content=body.model_dump())

def _guarded(guard: ConnectionGuard, operation):
    outcome = guard.with_connection(operation)
    return DATABASE_UNAVAILABLE if outcome is UNAVAILABLE else outcome

@router.post("/register", response_model=ApiResponse, responses=FAILURE_RESPONSES)
def register(payload: ClienteCreate, guard: ConnectionGuard = Depends(get_guard)):
    outcome = _guarded(guard, lambda db: ClienteService(db).register(payload))
    if isinstance(outcome, Registered):
        return ApiResponse(success=True, message="registered")
    return failure_response(outcome)

@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ApiResponse, "description": "Invalid email or password"}, **FAILURE_RESPONSES},
)
def login(payload: LoginRequest, guard: ConnectionGuard = Depends(get_guard)):
    outcome = _guarded(guard, lambda db: ClienteService(db).login(payload.email, payload.password))
    if isinstance(outcome, Authenticated):
        return LoginResponse(
            success=True,
            message="login ok",
            customer=ClienteSummary(id=outcome.id, name=outcome.name),
        )
    return failure_response(outcome)

@router.get("/clientes", response_model=list[ClienteRead], responses=FAILURE_RESPONSES)
def list_clientes(guard: ConnectionGuard = Depends(get_guard)):
    """All customers ordered by id; passwords are never returned"""
    outcome: Union[list, Failure] = _guarded(guard, lambda db: ClienteService(db).list())
    if isinstance(outcome, Failure):
        return failure_response(outcome)
    return outcome
