# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    Permission,
    InvitationStatus,
    InvitationAction,
)

# -------------------------
# Results
# -------------------------
from .results import (
    Rejection,
    ServiceResult,
)

# -------------------------
# Principal
# -------------------------
from .user import (
    Principal,
    UserRead,
    RegistrationData,
    AccountRegistration,
)

# -------------------------
# Map Models
# -------------------------
from .map import (
    MapCreate,
    MapUpdate,
    MapRead,
    MapAccessRead,
    MapUserRead,
    RoleUpdate,
)

# -------------------------
# Invitation Models
# -------------------------
from .invitation import (
    InvitationCreate,
    InvitationRead,
    InvitationTokenRead,
    InvitationResponse,
)

# -------------------------
# Point / Category Models
# -------------------------
from .poi import (
    CategoryCreate,
    CategoryUpdate,
    CategoryRead,
    PoiCreate,
    PoiUpdate,
    PoiRead,
)

__all__ = [
    # enums
    "Role",
    "Permission",
    "InvitationStatus",
    "InvitationAction",

    # results
    "Rejection",
    "ServiceResult",

    # users
    "Principal",
    "UserRead",
    "RegistrationData",
    "AccountRegistration",

    # maps
    "MapCreate",
    "MapUpdate",
    "MapRead",
    "MapAccessRead",
    "MapUserRead",
    "RoleUpdate",

    # points / categories
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryRead",
    "PoiCreate",
    "PoiUpdate",
    "PoiRead",

    # invitations
    "InvitationCreate",
    "InvitationRead",
    "InvitationTokenRead",
    "InvitationResponse",
]
