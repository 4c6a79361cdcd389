"""Mapping between LLVM/Rust target triples and c3c target names.

c3c names targets ``<os>-<arch>`` (``linux-x64``, ``macos-aarch64``,
``mingw-x64``), while host build systems usually speak full triples such as
``x86_64-unknown-linux-gnu``.
"""

import platform
import re


ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "x86",
    "i586": "x86",
    "i686": "x86",
    "x86": "x86",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "riscv64gc": "riscv64",
    "riscv64": "riscv64",
    "riscv32": "riscv32",
}

OS_ALIASES = {
    "linux": "linux",
    "windows": "windows",
    "darwin": "macos",
    "macos": "macos",
    "macosx": "macos",
    "freebsd": "freebsd",
    "netbsd": "netbsd",
    "openbsd": "openbsd",
    "android": "android",
    "ios": "ios",
}

MINGW_ENVIRONMENTS = {"gnu", "gnullvm"}

_C3_TARGET = re.compile(r"^[a-z]+-[a-z0-9_]+$|^wasm(32|64)$")


def is_c3_target(target: str) -> bool:
    """Whether ``target`` is already in c3c's ``<os>-<arch>`` form."""
    return bool(_C3_TARGET.match(target)) and target.split("-")[0] in (
        set(OS_ALIASES.values()) | {"mingw", "wasm32", "wasm64", "elf"}
    )


def to_c3_target(target: str) -> str:
    """Translate a target triple to the c3c target name.

    Names already in c3c form are returned unchanged. Windows triples using
    the GNU environment map to ``mingw``; ``x86_64`` maps to ``x64``.

    Examples:
        >>> to_c3_target("x86_64-unknown-linux-gnu")
        'linux-x64'
        >>> to_c3_target("x86_64-pc-windows-gnu")
        'mingw-x64'
        >>> to_c3_target("aarch64-apple-darwin")
        'macos-aarch64'
    """
    target = target.strip().lower()
    if is_c3_target(target):
        return target

    parts = target.split("-")
    arch_part = parts[0]
    if arch_part.startswith("wasm"):
        return "wasm64" if arch_part == "wasm64" else "wasm32"

    arch = ARCH_ALIASES.get(arch_part, arch_part)

    os_index = next(
        (i for i, part in enumerate(parts[1:], start=1) if part in OS_ALIASES),
        None,
    )
    if os_index is None:
        # Unknown OS: position follows the vendor field for 4-part triples
        os_index = 2 if len(parts) == 4 else 1
        if os_index >= len(parts):
            return target
        os_name = parts[os_index]
    else:
        os_name = OS_ALIASES[parts[os_index]]

    environment = parts[os_index + 1] if os_index + 1 < len(parts) else ""
    if os_name == "windows" and environment in MINGW_ENVIRONMENTS:
        os_name = "mingw"
    elif environment.startswith("android"):
        # aarch64-linux-android, armv7-linux-androideabi
        os_name = "android"

    return f"{os_name}-{arch}"


def host_target() -> str:
    """c3c target name of the machine we are running on."""
    system = platform.system().lower()
    machine = platform.machine().lower()
    os_name = OS_ALIASES.get(system, system)
    arch = ARCH_ALIASES.get(machine, machine)
    return f"{os_name}-{arch}"


def platform_family(c3_target: str | None) -> str:
    """Artifact naming family: ``windows``, ``mingw``, ``macos`` or ``unix``.

    Args:
        c3_target: c3c target name, or None for the host
    """
    os_name = (c3_target or host_target()).split("-")[0]
    if os_name in ("windows", "mingw", "macos"):
        return os_name
    return "unix"
