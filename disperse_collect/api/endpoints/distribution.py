from fastapi import APIRouter, Depends

from disperse_collect.api.dependencies import get_distribution_service
from disperse_collect.api.schemas import (
    ApproveRequest,
    CollectErc20Request,
    DisperseCollectResponse,
    DisperseErc20Request,
    DisperseEthRequest,
    TransactionResponse,
    TransferRequest,
)
from disperse_collect.core.service import DistributionResult, DistributionService

api = APIRouter()
distribution_api = api


def _distribution_response(result: DistributionResult) -> DisperseCollectResponse:
    return DisperseCollectResponse(tx_hash=result.tx_hash, transfers=result.transfers)


@api.post("/disperse-eth", response_model=DisperseCollectResponse, tags=["Distribution"])
async def disperse_eth(
    request: DisperseEthRequest,
    service: DistributionService = Depends(get_distribution_service),
):
    """Send native currency from ``caller`` to every recipient in one transaction."""
    result = await service.disperse_eth(caller=request.caller, recipients=request.recipients)
    return _distribution_response(result)


@api.post("/disperse-erc20", response_model=DisperseCollectResponse, tags=["Distribution"])
async def disperse_erc20(
    request: DisperseErc20Request,
    service: DistributionService = Depends(get_distribution_service),
):
    """Send ``token`` from ``spender`` (via its allowance) to every recipient."""
    result = await service.disperse_erc20(
        caller=request.caller,
        spender=request.spender,
        token=request.token,
        recipients=request.recipients,
    )
    return _distribution_response(result)


@api.post("/collect-erc20", response_model=DisperseCollectResponse, tags=["Distribution"])
async def collect_erc20(
    request: CollectErc20Request,
    service: DistributionService = Depends(get_distribution_service),
):
    """Pull ``token`` from every spender (via allowances) into ``recipient``."""
    result = await service.collect_erc20(
        caller=request.caller,
        recipient=request.recipient,
        token=request.token,
        spenders=request.spenders,
    )
    return _distribution_response(result)


@api.post("/transfer", response_model=TransactionResponse, tags=["Transfers"])
async def transfer(
    request: TransferRequest,
    service: DistributionService = Depends(get_distribution_service),
):
    receipt = await service.transfer(
        caller=request.caller,
        recipient=request.recipient,
        value=request.value,
        token=request.token,
    )
    return TransactionResponse(tx_hash=receipt.tx_hash)


@api.post("/approve", response_model=TransactionResponse, tags=["Transfers"])
async def approve(
    request: ApproveRequest,
    service: DistributionService = Depends(get_distribution_service),
):
    receipt = await service.approve(
        caller=request.caller,
        spender=request.spender,
        token=request.token,
        amount=request.amount,
    )
    return TransactionResponse(tx_hash=receipt.tx_hash)
