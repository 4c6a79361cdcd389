"""c3c toolchain discovery and target naming."""

from .locator import ToolchainLocator, create_toolchain_locator
from .session import ToolchainSession
from .targets import host_target, platform_family, to_c3_target


__all__ = [
    "ToolchainLocator",
    "ToolchainSession",
    "create_toolchain_locator",
    "host_target",
    "platform_family",
    "to_c3_target",
]
