"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import time
from datetime import datetime
from typing import Optional

from eth_account import Account
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from disperse_collect.api.dependencies import api_key_protection
from disperse_collect.api.endpoints.distribution import distribution_api
from disperse_collect.core.errors import DcError
from disperse_collect.core.service import DistributionService
from disperse_collect.error_handler import ErrorHandler
from disperse_collect.integrations.clients.mocks.chain import DEFAULT_CONTRACT_ADDRESS, MockChainClient
from disperse_collect.integrations.clients.web3_chain import Web3ChainClient
from disperse_collect.integrations.contracts.interfaces import ChainClient
from disperse_collect.utils.config_loader import AppConfig, load_app_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Disperse/Collect API"
SERVICE_VERSION = "1.0.0"

error_handler = ErrorHandler()


# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

def build_chain_client(config: AppConfig) -> ChainClient:
    """Pick the real or in-memory chain client. This is the only place that decides."""
    private_keys = [s.get_secret_value() for s in config.tx_signers]

    if config.use_real_chain:
        if not config.rpc_url or not config.contract_address:
            raise ValueError("RPC_URL and CONTRACT_ADDRESS must be set for real integrations.")
        return Web3ChainClient(
            rpc_url=config.rpc_url,
            contract_address=config.contract_address,
            private_keys=private_keys,
            request_timeout=config.request_timeout_seconds,
            receipt_timeout=config.receipt_timeout_seconds,
        )

    logger.warning("RPC_URL not set; using in-memory mock chain client")
    return MockChainClient(
        contract_address=config.contract_address or DEFAULT_CONTRACT_ADDRESS,
        signers=[Account.from_key(key).address for key in private_keys],
    )


def create_app(config: Optional[AppConfig] = None, chain: Optional[ChainClient] = None) -> FastAPI:
    config = config or load_app_config()
    chain = chain or build_chain_client(config)

    app = FastAPI(
        title=SERVICE_NAME,
        description="Resolve and submit batched native/ERC20 distributions",
        version=SERVICE_VERSION,
        dependencies=[Depends(api_key_protection)],
    )
    app.state.config = config
    app.state.chain = chain
    app.state.distribution_service = DistributionService(chain)

    app.include_router(distribution_api, prefix="/api")

    # ========================================================================
    # MIDDLEWARE / ERROR HANDLERS
    # ========================================================================
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.exception_handler(DcError)
    async def handle_dc_error(request: Request, exc: DcError):
        status_code, body = error_handler.to_response(exc, context={"path": request.url.path})
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        message = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
            for err in exc.errors()
        )
        status_code, body = error_handler.validation_response(message)
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        status_code, body = error_handler.to_response(exc, context={"path": request.url.path})
        return JSONResponse(status_code=status_code, content=body)

    # ========================================================================
    # ENDPOINTS
    # ========================================================================
    @app.get("/", tags=["Health"])
    async def root():
        """Health check endpoint."""
        return {
            "service": SERVICE_NAME,
            "status": "healthy",
            "version": SERVICE_VERSION,
            "timestamp": datetime.now().isoformat(),
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Detailed health check (chain client, contract)."""
        return {
            "status": "healthy",
            "chain": {
                "client": chain.kind,
                "disperse_contract": chain.disperse_contract_address,
            },
            "timestamp": datetime.now().isoformat(),
        }

    # ========================================================================
    # STARTUP/SHUTDOWN EVENTS
    # ========================================================================
    @app.on_event("startup")
    async def startup_event():
        logger.info("Starting %s...", SERVICE_NAME)
        logger.info(
            "Chain client=%s contract=%s signers=%d api_keys=%s",
            chain.kind,
            chain.disperse_contract_address,
            len(config.tx_signers),
            "on" if config.api_keys else "off",
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down %s...", SERVICE_NAME)
        await chain.close()

    return app
