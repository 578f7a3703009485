import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from idle_miner.domain.errors import (
    EconomyError,
    InsufficientFundsError,
    InvariantViolation,
    PlayerNotFoundError,
    StaleStateError,
    ValidationError,
)
from idle_miner.models.dc_models import (
    BoostModel,
    InitModel,
    NetworkViewModel,
    PlayerIdModel,
    PlayerViewModel,
    PurchaseAssetModel,
    PurchaseUpgradeModel,
)
from idle_miner.redis_subscriber import NetworkSubscriber
from idle_miner.services.game import GameService

game_router = APIRouter()

ERROR_STATUS = {
    PlayerNotFoundError: status.HTTP_404_NOT_FOUND,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    InsufficientFundsError: status.HTTP_400_BAD_REQUEST,
    StaleStateError: status.HTTP_409_CONFLICT,
    InvariantViolation: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_game_service(request: Request) -> GameService:
    return request.app.state.game_service


def to_http_exception(error: EconomyError) -> HTTPException:
    """Map a domain failure to the HTTP status the client sees

    Args:
        error (EconomyError): Failure raised by a command

    Returns:
        HTTPException: Exception carrying the status and the failure message
    """
    status_code = ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logging.error(f"Invariant violated: {error}")
    else:
        logging.info(f"Command rejected: {error}")
    return HTTPException(status_code=status_code, detail=str(error))


class PlayerAPI:
    @staticmethod
    @game_router.post("/init", response_model=PlayerViewModel)
    async def init(body: InitModel, service: GameService = Depends(get_game_service)):
        try:
            return await service.init(body.external_id, body.username)
        except EconomyError as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.post("/sync", response_model=PlayerViewModel)
    async def sync(body: PlayerIdModel, service: GameService = Depends(get_game_service)):
        try:
            return await service.sync(body.player_id)
        except EconomyError as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.post("/click", response_model=PlayerViewModel)
    async def click(body: PlayerIdModel, service: GameService = Depends(get_game_service)):
        try:
            return await service.click(body.player_id)
        except EconomyError as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.post("/prestige", response_model=PlayerViewModel)
    async def prestige(body: PlayerIdModel, service: GameService = Depends(get_game_service)):
        try:
            return await service.prestige(body.player_id)
        except EconomyError as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.post("/boost", response_model=PlayerViewModel)
    async def boost(body: BoostModel, service: GameService = Depends(get_game_service)):
        try:
            return await service.grant_boost(body.player_id, body.multiplier, body.duration_seconds)
        except EconomyError as e:
            raise to_http_exception(e)


class PurchaseAPI:
    @staticmethod
    @game_router.post("/purchase_asset", response_model=PlayerViewModel)
    async def purchase_asset(body: PurchaseAssetModel, service: GameService = Depends(get_game_service)):
        try:
            return await service.purchase_asset(body.player_id, body.asset_type.value)
        except EconomyError as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.post("/purchase_upgrade", response_model=PlayerViewModel)
    async def purchase_upgrade(body: PurchaseUpgradeModel, service: GameService = Depends(get_game_service)):
        try:
            return await service.purchase_upgrade(body.player_id, body.upgrade_type.value)
        except EconomyError as e:
            raise to_http_exception(e)


class NetworkAPI:
    @staticmethod
    @game_router.get("/network", response_model=NetworkViewModel)
    async def network(service: GameService = Depends(get_game_service)):
        return await service.network()

    @staticmethod
    @game_router.post("/network/step", response_model=NetworkViewModel)
    async def step_network(service: GameService = Depends(get_game_service)):
        try:
            return await service.step_network()
        except EconomyError as e:
            raise to_http_exception(e)

    @staticmethod
    @game_router.get("/network/stream")
    async def stream_network(request: Request, service: GameService = Depends(get_game_service)):
        initial = await service.repository.load_network_state()
        subscriber = NetworkSubscriber(request.app.state.redis)
        return StreamingResponse(
            subscriber.event_generator(initial), media_type="text/event-stream"
        )
