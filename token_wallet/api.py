"""
FastAPI REST API Module

Exposes the wallet's get_balance, send_tokens and receive_tokens
operations over HTTP. Each application owns exactly one Wallet, created
by the factory and handed to endpoints through dependency injection.
"""

from datetime import datetime, timezone
from typing import Optional
from fastapi import FastAPI, HTTPException, Depends, Request, status
from fastapi.middleware.cors import CORSMiddleware
import logging
import uvicorn

from . import __version__
from .config import WalletConfig, get_config
from .exceptions import InsufficientFundsError, InvalidAddressError, InvalidAmountError, BalanceOverflowError
from .logging_config import setup_logging
from .schemas import (
    SendTokensRequest, ReceiveTokensRequest, BalanceResponse,
    AddressBalanceResponse, OperationResponse, SnapshotResponse
)
from .wallet import Wallet


logger = logging.getLogger(__name__)


def get_wallet(request: Request) -> Wallet:
    """Dependency returning the wallet owned by the running application"""
    return request.app.state.wallet


def create_app(wallet: Optional[Wallet] = None, config: Optional[WalletConfig] = None) -> FastAPI:
    """
    Create and configure the FastAPI application

    Args:
        wallet: Wallet to serve; a fresh empty one is created if omitted
        config: Configuration; the process configuration is used if omitted
    """
    config = config or get_config()

    setup_logging(
        level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file
    )

    app = FastAPI(
        title="Token Wallet API",
        description="Single-owner token wallet with atomic transfers",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.wallet = wallet if wallet is not None else Wallet(max_balance=config.max_balance)
    app.state.config = config

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "token_wallet_api",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Token Wallet API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "balance": "/balance",
                "send": "/send",
                "receive": "/receive",
                "snapshot": "/snapshot"
            }
        }

    @app.get("/balance", response_model=BalanceResponse)
    async def get_balance(wallet: Wallet = Depends(get_wallet)):
        """Get the owner's balance"""
        return BalanceResponse(balance=wallet.get_balance())

    @app.get("/balances/{address}", response_model=AddressBalanceResponse)
    async def get_address_balance(address: str, wallet: Wallet = Depends(get_wallet)):
        """Get a counterparty's balance"""
        try:
            balance = wallet.balance_of(address)
        except InvalidAddressError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return AddressBalanceResponse(address=address, balance=balance)

    @app.post("/send", response_model=OperationResponse)
    async def send_tokens(request: SendTokensRequest, wallet: Wallet = Depends(get_wallet)):
        """Send tokens from the owner's balance"""
        try:
            balance = wallet.send_tokens(request.to_address, request.amount)
        except (InsufficientFundsError, InvalidAddressError, InvalidAmountError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except BalanceOverflowError as e:
            logger.error(f"Send aborted: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

        return OperationResponse(message="Tokens sent successfully", balance=balance)

    @app.post("/receive", response_model=OperationResponse)
    async def receive_tokens(request: ReceiveTokensRequest, wallet: Wallet = Depends(get_wallet)):
        """Credit tokens to the owner's balance"""
        try:
            balance = wallet.receive_tokens(request.from_address, request.amount)
        except (InvalidAddressError, InvalidAmountError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except BalanceOverflowError as e:
            logger.error(f"Receive aborted: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

        return OperationResponse(message="Tokens received successfully", balance=balance)

    @app.get("/snapshot", response_model=SnapshotResponse)
    async def get_snapshot(wallet: Wallet = Depends(get_wallet)):
        """Get a consistent copy of the whole balance table"""
        return wallet.snapshot().to_dict()

    logger.info("Token wallet API initialized")
    return app


def run_server(host: str = "0.0.0.0", port: int = 8090, debug: bool = False):
    """Run the FastAPI server"""
    uvicorn.run(
        "token_wallet.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )
