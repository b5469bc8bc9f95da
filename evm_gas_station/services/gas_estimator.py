from typing import Optional

from evm_gas_station.models.gas_models import GasLimitRequest, TxOverrides
from evm_gas_station.utils.errors import EstimationError
from evm_gas_station.utils.logger import LogArgs, get_logger

logger = get_logger(__name__)


def apply_buffer(estimate: int, buffer_percentage: int) -> int:
    return estimate + estimate * buffer_percentage // 100


class GasEstimator:
    """
    Gas limit for a state changing call: one dry-run estimation padded by a
    percentage buffer, or the caller's manual limit when the dry run fails.
    """

    async def simulate(self, request: GasLimitRequest) -> int:
        contract_function = getattr(request.contract.functions, request.method)(
            *request.args
        )
        return await contract_function.estimate_gas(request.simulation_params())

    async def estimate(self, request: GasLimitRequest) -> int:
        log_args = {LogArgs.contract_method: request.method}
        try:
            raw_estimate = await self.simulate(request)
        except Exception as e:
            if request.manual_override is None:
                raise EstimationError(
                    request.method, str(e) or type(e).__name__, call_args=list(request.args)
                ) from e
            log_args[LogArgs.gas_limit] = request.manual_override
            logger.warning(
                f'Gas estimation for %({LogArgs.contract_method})s failed, '
                f'using manual gas limit %({LogArgs.gas_limit})s',
                log_args,
                extra={**log_args, LogArgs.ex: str(e)},
            )
            return request.manual_override

        gas_limit = apply_buffer(raw_estimate, request.buffer_percentage)
        log_args[LogArgs.gas_limit] = gas_limit
        logger.debug(
            f'Estimated gas limit for %({LogArgs.contract_method})s: %({LogArgs.gas_limit})s',
            log_args,
            extra=log_args,
        )
        return gas_limit

    async def get_overrides_with_estimated_gas_limit(
        self,
        request: GasLimitRequest,
        overrides: Optional[TxOverrides] = None,
    ) -> TxOverrides:
        """
        Merge an estimated gas limit into the caller's overrides.
        An explicit gas_limit in overrides always wins and no simulation is made.
        """
        overrides = overrides or TxOverrides()
        if overrides.gas_limit is not None:
            return overrides
        gas_limit = await self.estimate(request)
        return overrides.model_copy(update={'gas_limit': gas_limit})
