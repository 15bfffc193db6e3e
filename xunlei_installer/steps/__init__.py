from .step_10_prepare_config import PrepareConfigStep
from .step_20_stage_assets import StageAssetsStep
from .step_30_set_ownership import SetOwnershipStep
from .step_40_spoof_identity import SpoofIdentityStep
from .step_50_register_service import RegisterServiceStep

__all__ = [
    "PrepareConfigStep",
    "StageAssetsStep",
    "SetOwnershipStep",
    "SpoofIdentityStep",
    "RegisterServiceStep",
]
