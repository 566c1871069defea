"""Saving and loading exploration sessions as YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config import FractalConfig, Mandelbrot, config_options, make_config
from .palette import DEFAULT_PALETTE
from .plane import ViewConfig
from .renderer import validate_fractal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    """Everything needed to reproduce a render, apart from its size."""

    fractal: FractalConfig = field(default_factory=Mandelbrot)
    view: ViewConfig = field(default_factory=ViewConfig)
    palette: str = DEFAULT_PALETTE
    shift: float = 0.0


def _complex_to_dict(value: complex) -> dict[str, float]:
    return {"re": float(value.real), "im": float(value.imag)}


def _dict_to_complex(value: dict[str, Any]) -> complex:
    return complex(float(value["re"]), float(value["im"]))


def session_to_dict(session: Session) -> dict[str, Any]:
    """Convert a Session to plain data for YAML serialization."""

    fractal: dict[str, Any] = {"kind": session.fractal.kind.value}
    for name, value in config_options(session.fractal).items():
        fractal[name] = _complex_to_dict(value) if isinstance(value, complex) else value
    return {
        "fractal": fractal,
        "view": {
            "center": _complex_to_dict(session.view.center),
            "zoom_scale": float(session.view.zoom_scale),
            "rotation_degrees": float(session.view.rotation_degrees),
        },
        "presentation": {
            "palette": session.palette,
            "shift": float(session.shift),
        },
    }


def dict_to_session(settings: dict[str, Any]) -> Session:
    """Convert a dictionary produced by :func:`session_to_dict` back."""

    try:
        fractal_dict = dict(settings["fractal"])
        kind = fractal_dict.pop("kind")
        if "parameter" in fractal_dict:
            fractal_dict["parameter"] = _dict_to_complex(fractal_dict["parameter"])
        fractal = make_config(kind, **fractal_dict)
        validate_fractal(fractal)

        view_dict = settings.get("view", {})
        view = ViewConfig(
            center=_dict_to_complex(view_dict["center"]) if "center" in view_dict else ViewConfig.center,
            zoom_scale=float(view_dict.get("zoom_scale", ViewConfig.zoom_scale)),
            rotation_degrees=float(view_dict.get("rotation_degrees", ViewConfig.rotation_degrees)),
        )

        presentation = settings.get("presentation", {})
        return Session(
            fractal=fractal,
            view=view,
            palette=str(presentation.get("palette", DEFAULT_PALETTE)),
            shift=float(presentation.get("shift", 0.0)),
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise ValueError(f"Malformed session settings: {exc!r}") from exc


def save_session(path: str | Path, session: Session) -> Path:
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as file:
        yaml.safe_dump(session_to_dict(session), file, default_flow_style=False, sort_keys=False)
    logger.info("Settings saved to %s", path)
    return path


def load_session(path: str | Path) -> Session:
    path = Path(path).expanduser()
    with path.open("r", encoding="utf-8") as file:
        settings = yaml.safe_load(file)
    if not isinstance(settings, dict):
        raise ValueError(f"{path} does not contain a settings mapping.")
    logger.info("Settings loaded from %s", path)
    return dict_to_session(settings)
