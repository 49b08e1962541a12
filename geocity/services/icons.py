"""
Map marker icons for reports and clusters.

Emergency reports are drawn with their emergency type icon; other reports
with the icon of their AI category. Icons are served as SVG data URIs so the
web client can hand them straight to the map SDK.
"""

from typing import Dict, Optional
from urllib.parse import quote

EMERGENCY_ICON_CONFIGS: Dict[str, Dict] = {
    "MEDICAL": {"icon": "ambulance", "color": "#3B82F6", "animation": "pulse", "blinkRate": 1000, "size": 32},
    "FIRE_HAZARD": {"icon": "flame", "color": "#EF4444", "animation": "blink", "blinkRate": 500, "size": 32},
    "LAW_ENFORCEMENT": {"icon": "shield", "color": "#8B5CF6", "animation": "pulse", "blinkRate": 800, "size": 32},
    "ENVIRONMENTAL": {"icon": "alert-triangle", "color": "#F59E0B", "animation": "blink", "blinkRate": 1200, "size": 32},
    "SAFE": {"icon": "check-circle", "color": "#10B981", "animation": "none", "blinkRate": 0, "size": 24},
    "WARNING": {"icon": "alert-triangle", "color": "#F59E0B", "animation": "pulse", "blinkRate": 1000, "size": 28},
    "DANGER": {"icon": "alert-circle", "color": "#EF4444", "animation": "blink", "blinkRate": 600, "size": 32},
}

# Cluster priority -> category used for the marker
PRIORITY_CATEGORIES = {
    "high": "DANGER",
    "medium": "WARNING",
    "safe": "SAFE",
    "low": "WARNING",
}

_SHAPES = {
    "ambulance": (
        '<rect x="2" y="8" width="16" height="12" rx="2" fill="{color}" stroke="white" stroke-width="1"/>'
        '<rect x="4" y="10" width="4" height="2" fill="white"/>'
        '<rect x="10" y="10" width="4" height="2" fill="white"/>'
        '<rect x="4" y="14" width="4" height="2" fill="white"/>'
        '<rect x="10" y="14" width="4" height="2" fill="white"/>'
        '<circle cx="6" cy="18" r="2" fill="white"/>'
        '<circle cx="16" cy="18" r="2" fill="white"/>'
        '<path d="M18 12h2v2h-2z" fill="white"/>'
    ),
    "flame": (
        '<path d="M12 2C8 6 4 10 4 14c0 4 3 6 8 6s8-2 8-6c0-4-4-8-8-12z" fill="{color}" stroke="white" stroke-width="1"/>'
        '<path d="M12 6c-2 2-4 4-4 6 0 2 1 3 4 3s4-1 4-3c0-2-2-4-4-6z" fill="white" opacity="0.3"/>'
    ),
    "shield": (
        '<path d="M12 2L3 6v6c0 5.55 3.84 10.74 9 12 5.16-1.26 9-6.45 9-12V6l-9-4z" fill="{color}" stroke="white" stroke-width="1"/>'
        '<path d="M12 8l-2 2v4l2 2 2-2v-4l-2-2z" fill="white"/>'
    ),
    "alert-triangle": (
        '<path d="M12 2L2 20h20L12 2z" fill="{color}" stroke="white" stroke-width="1"/>'
        '<path d="M12 8v6" stroke="white" stroke-width="2" stroke-linecap="round"/>'
        '<circle cx="12" cy="18" r="1" fill="white"/>'
    ),
    "check-circle": (
        '<circle cx="12" cy="12" r="10" fill="{color}" stroke="white" stroke-width="1"/>'
        '<path d="M9 12l2 2 4-4" stroke="white" stroke-width="2" stroke-linecap="round" stroke-linejoin="round"/>'
    ),
    "alert-circle": (
        '<circle cx="12" cy="12" r="10" fill="{color}" stroke="white" stroke-width="1"/>'
        '<path d="M12 8v6" stroke="white" stroke-width="2" stroke-linecap="round"/>'
        '<circle cx="12" cy="18" r="1" fill="white"/>'
    ),
}


def get_icon_config(emergency_type: Optional[str] = None, category: Optional[str] = None) -> Dict:
    """Emergency type wins over category; WARNING is the default."""
    if emergency_type and emergency_type in EMERGENCY_ICON_CONFIGS:
        return dict(EMERGENCY_ICON_CONFIGS[emergency_type])
    if category and category in EMERGENCY_ICON_CONFIGS:
        return dict(EMERGENCY_ICON_CONFIGS[category])
    return dict(EMERGENCY_ICON_CONFIGS["WARNING"])


def generate_svg_icon(config: Dict) -> str:
    """Render an icon config as an SVG data URI, with its CSS animation."""
    size = config["size"]
    shape = _SHAPES.get(config["icon"], _SHAPES["alert-circle"]).format(color=config["color"])

    style = ""
    if config["animation"] == "pulse":
        style = (
            "<style>@keyframes pulse { 0%, 100% { opacity: 1; } 50% { opacity: 0.5; } }"
            " svg { animation: pulse 2s infinite; }</style>"
        )
    elif config["animation"] == "blink":
        style = (
            "<style>@keyframes blink { 0%, 50% { opacity: 1; } 51%, 100% { opacity: 0.3; } }"
            f" svg {{ animation: blink {config['blinkRate']}ms infinite; }}</style>"
        )

    svg = (
        f'<svg width="{size}" height="{size}" viewBox="0 0 24 24" fill="none" '
        f'xmlns="http://www.w3.org/2000/svg">{shape}{style}</svg>'
    )
    return f"data:image/svg+xml;charset=UTF-8,{quote(svg)}"


def get_cluster_icon(cluster: Dict) -> Dict:
    """Icon config for a marker cluster built by the clustering service."""
    if cluster.get("isEmergency"):
        return get_icon_config(emergency_type=cluster.get("emergencyType"))
    return get_icon_config(category=PRIORITY_CATEGORIES.get(cluster.get("priority") or "medium"))
