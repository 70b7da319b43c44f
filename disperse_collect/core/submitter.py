"""
Transaction submission: signer check, access-list simulation, send, confirm.
"""

import logging

from disperse_collect.core.errors import DcError
from disperse_collect.integrations.contracts.interfaces import (
    ChainClient,
    ContractCall,
    TransactionReceipt,
)

logger = logging.getLogger(__name__)


class TransactionSubmitter:
    def __init__(self, chain: ChainClient) -> None:
        self.chain = chain

    async def submit(self, call: ContractCall, signer: str) -> TransactionReceipt:
        """
        Send ``call`` from ``signer`` and wait for it to be mined.

        Raises:
            DcError: SIGNER_NOT_FOUND before any network call if no key is
                configured for ``signer``; TRANSPORT or UNEXPECTED if the
                simulate/send/confirm round-trips fail.
        """
        if not self.chain.has_signer_for(signer):
            raise DcError.signer_not_found(signer)

        try:
            access_list = await self.chain.create_access_list(call, signer)
            pending = await self.chain.send_transaction(call, signer, access_list)
            logger.info("Sent %s from %s: %s", call.description or "transaction", signer, pending.tx_hash)
            receipt = await pending.get_receipt()
        except Exception as exc:
            raise DcError.from_chain_error(exc) from exc

        logger.info("Confirmed %s in block %s", receipt.tx_hash, receipt.block_number)
        return receipt
