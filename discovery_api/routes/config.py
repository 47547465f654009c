"""Configuration endpoint: ranking parameters and their derived values."""

from fastapi import APIRouter

from discovery.computed_params import compute_parameters

from ..state import get_state

router = APIRouter()


@router.get("")
def get_ranking_config():
    """Current RankingConfig plus read-only computed parameters."""
    config = get_state().service.config
    return {
        "config": config.model_dump(),
        "computed": compute_parameters(config),
    }
