"""
FastAPI web application for finval.

This module provides REST API endpoints for:
- Validating a single field (the programmatic twin of `finval check`)
- User signup
- Opening checking / savings accounts
- Funding accounts from a card or a bank account
- Listing transactions

Every endpoint validates through the same `Gate` the CLI uses.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, List, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

# Internal imports
from .. import __version__
from ..config import FinvalConfig, load_config
from ..engine.gate import Gate
from ..errors import FlowError, NotFound
from ..validate.state import all_state_codes
from . import flows
from .database import Account, Database, Transaction, User

logger = logging.getLogger(__name__)

# Pydantic models for API requests/responses
class ValidateRequest(BaseModel):
    """Raw value to validate; strings and JSON numbers are both accepted."""
    value: Any = None

class VerdictResponse(BaseModel):
    field: str
    valid: bool
    normalized: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    issues: List[str] = []

class SignupRequest(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str
    phone_number: str
    address: str
    city: str
    state: str
    zip_code: str

class UserProfile(BaseModel):
    """User profile information (never the password hash)."""
    id: int
    email: str
    first_name: str
    last_name: str
    phone_number: str
    address: str
    city: str
    state: str
    zip_code: str

class CreateAccountRequest(BaseModel):
    account_type: Literal["checking", "savings"]

class AccountResponse(BaseModel):
    id: int
    account_number: str
    account_type: str
    balance: str
    status: str

class FundingSourceRequest(BaseModel):
    type: Literal["card", "bank"]
    account_number: Optional[str] = None
    routing_number: Optional[str] = None

class FundRequest(BaseModel):
    amount: Any = None
    funding_source: FundingSourceRequest

class TransactionResponse(BaseModel):
    id: int
    account_id: int
    account_type: str
    type: str
    amount: str
    description: str
    status: str
    created_at: Optional[str] = None
    processed_at: Optional[str] = None

class FundResponse(BaseModel):
    transaction: TransactionResponse
    amount: str
    new_balance: str


def _profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        phone_number=user.phone_number,
        address=user.address,
        city=user.city,
        state=user.state,
        zip_code=user.zip_code,
    )

def _account(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        account_number=account.account_number,
        account_type=account.account_type.value,
        balance=str(account.balance),
        status=account.status.value,
    )

def _transaction(txn: Transaction, account: Account) -> TransactionResponse:
    return TransactionResponse(
        id=txn.id,
        account_id=txn.account_id,
        account_type=account.account_type.value,
        type=txn.type.value,
        amount=str(txn.amount),
        description=txn.description,
        status=txn.status.value,
        created_at=txn.created_at.isoformat() if txn.created_at else None,
        processed_at=txn.processed_at.isoformat() if txn.processed_at else None,
    )


# Global configuration (FINVAL_CONFIG points at a .finval.yaml)
def _config_from_env() -> FinvalConfig:
    path = os.getenv("FINVAL_CONFIG")
    return load_config(Path(path) if path else None)

finval_config = _config_from_env()
gate = Gate(finval_config)

# Database handle (opened at startup, released at shutdown)
database = Database(finval_config.database.url, echo=finval_config.database.echo)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database once for the process and release it on shutdown."""
    database.init()
    logger.info("finval API started")
    yield
    database.close()
    logger.info("finval API stopped")

# FastAPI app configuration
app = FastAPI(
    title="finval API",
    description="Validation and normalization for financial onboarding and funding",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Security
security = HTTPBearer()


@app.exception_handler(FlowError)
async def flow_error_handler(request: Request, exc: FlowError):
    """Surface the flow's own message; never a generic substitute."""
    logger.info("flow error %s on %s", exc.code, request.url.path)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


# Dependency to get database session
def get_db():
    """Get database session."""
    with database.session() as db:
        yield db

def get_gate() -> Gate:
    return gate

def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db=Depends(get_db),
) -> User:
    """
    Resolve the caller from the bearer token.

    Sessions belong to the authentication service; here the token is the user
    id it issued.
    """
    try:
        user_id = int(credentials.credentials)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    try:
        return flows.get_user(db, user_id)
    except NotFound:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "finval API - validation for onboarding and funding",
        "version": __version__,
        "docs": "/docs",
    }

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "finval-api"}

@app.get("/states")
async def list_states():
    """Accepted state codes (50 states, DC, 5 territories)."""
    return {"states": all_state_codes()}

@app.post("/validate/{field}", response_model=VerdictResponse)
def validate_field(field: str, request: ValidateRequest, gate: Gate = Depends(get_gate)):
    """Validate one value with the same rules the CLI and the flows use."""
    if field not in gate.fields:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown field '{field}'")
    try:
        verdict = gate.check(field, request.value)
    except TypeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return VerdictResponse(field=field, **verdict.to_dict())

@app.post("/signup", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
def signup(request: SignupRequest, db=Depends(get_db), gate: Gate = Depends(get_gate)):
    """Create a user. Phone and state are stored in canonical form; the password only as a hash."""
    user = flows.signup(db, gate, flows.SignupForm(**request.model_dump()))
    return _profile(user)

@app.get("/profile", response_model=UserProfile)
def get_profile(current_user: User = Depends(get_current_user)):
    return _profile(current_user)

@app.get("/accounts", response_model=List[AccountResponse])
def get_accounts(current_user: User = Depends(get_current_user), db=Depends(get_db)):
    return [_account(a) for a in flows.list_accounts(db, current_user.id)]

@app.post("/accounts", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    request: CreateAccountRequest,
    current_user: User = Depends(get_current_user),
    db=Depends(get_db),
):
    return _account(flows.open_account(db, current_user.id, request.account_type))

@app.post("/accounts/{account_id}/fund", response_model=FundResponse)
def fund_account(
    account_id: int,
    request: FundRequest,
    current_user: User = Depends(get_current_user),
    db=Depends(get_db),
    gate: Gate = Depends(get_gate),
):
    """
    Fund an account from a card or a bank account.

    The response's `amount` is the normalized amount that was recorded; card
    digits are not echoed back.
    """
    source = flows.FundingSource(**request.funding_source.model_dump())
    try:
        result = flows.fund_account(db, gate, current_user.id, account_id, request.amount, source)
    except TypeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    account = db.get(Account, account_id)
    return FundResponse(
        transaction=_transaction(result.transaction, account),
        amount=str(result.amount),
        new_balance=str(result.new_balance),
    )

@app.get("/accounts/{account_id}/transactions", response_model=List[TransactionResponse])
def get_transactions(
    account_id: int,
    current_user: User = Depends(get_current_user),
    db=Depends(get_db),
):
    history = flows.list_transactions(db, current_user.id, account_id)
    return [_transaction(t, history.account) for t in history.transactions]

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
