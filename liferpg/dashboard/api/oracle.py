from fastapi import APIRouter, Depends

from liferpg.core.database import StateStore
from liferpg.services.ai_service import BUSY_MESSAGE, AdviceService
from ..dependencies import get_advice_service, get_store
from ..schemas import OracleResponse

router = APIRouter(prefix="/api/oracle", tags=["oracle"])

@router.post("", response_model=OracleResponse)
async def consult_oracle(
    store: StateStore = Depends(get_store),
    advice: AdviceService = Depends(get_advice_service)
):
    """Совет Оракула по текущим характеристикам"""
    message = await advice.generate_advice(store.stats(), store.profile)
    return OracleResponse(message=message, busy=message == BUSY_MESSAGE)
