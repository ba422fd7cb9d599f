from .phase_0_provision import ProvisionPhase
from .phase_1_key_init import KeyInitPhase
from .phase_2_seal import SealPhase
from .phase_3_sign_boot import SignBootPhase
from .phase_4_verity import VerityPhase

__all__ = [
    "ProvisionPhase",
    "KeyInitPhase",
    "SealPhase",
    "SignBootPhase",
    "VerityPhase",
]
