"""Curated archive of historical releases (read-only reference data)."""

from __future__ import annotations

from dataclasses import dataclass

_PACKAGE_BASE = "https://lf16-capcut.faceulv.com/obj/capcutpc-packages-us/packages"


@dataclass(frozen=True)
class ArchiveVersion:
    """A historical release worth pinning."""

    persona: str
    version: str
    description: str
    features: tuple[str, ...]
    download_url: str
    risk_level: str  # "Low", "Medium" or "High"


ARCHIVE_VERSIONS: tuple[ArchiveVersion, ...] = (
    ArchiveVersion(
        persona="Offline Purist",
        version="1.5.0",
        description="Zero cloud dependencies. Unrestricted 4K export.",
        features=("Clean UI", "Offline Only", "No Nags"),
        download_url=f"{_PACKAGE_BASE}/CapCut_1_5_0_230_capcutpc_0.exe",
        risk_level="Low",
    ),
    ArchiveVersion(
        persona="Audio Engineer",
        version="2.5.4",
        description="Multi-track audio & stable mixer. The golden era.",
        features=("Multi-Track", "Audio Mixer", "Keyframes"),
        download_url=f"{_PACKAGE_BASE}/CapCut_2_5_4_810_capcutpc_0_creatortool.exe",
        risk_level="Low",
    ),
    ArchiveVersion(
        persona="Classic Pro",
        version="2.9.0",
        description="Most free features before the generic paywalls.",
        features=("Max Free Features", "Stable", "Legacy UI"),
        download_url=f"{_PACKAGE_BASE}/CapCut_2_9_0_966_capcutpc_0_creatortool.exe",
        risk_level="Medium",
    ),
    ArchiveVersion(
        persona="Modern Stable",
        version="3.2.0",
        description="Good balance of modern features vs paywalls.",
        features=("Modern UI", "Smooth", "Balanced"),
        download_url=f"{_PACKAGE_BASE}/CapCut_3_2_0_1106_capcutpc_0_creatortool.exe",
        risk_level="Medium",
    ),
    ArchiveVersion(
        persona="Creator",
        version="3.9.0",
        description="Last version with free auto-captions (High Risk).",
        features=("Auto-Captions", "AI Features", "Effects"),
        download_url=f"{_PACKAGE_BASE}/CapCut_3_9_0_1459_capcutpc_0_creatortool.exe",
        risk_level="High",
    ),
    ArchiveVersion(
        persona="Power User",
        version="4.0.0",
        description="Track height adjustment & markers. Stricter paywall.",
        features=("Track Zoom", "Markers", "Adv Features"),
        download_url=f"{_PACKAGE_BASE}/CapCut_4_0_0_1539_capcutpc_0_creatortool.exe",
        risk_level="Medium",
    ),
)


def find_archive_version(version: str) -> ArchiveVersion | None:
    """Look up a catalog entry by exact version string."""
    for entry in ARCHIVE_VERSIONS:
        if entry.version == version:
            return entry
    return None
