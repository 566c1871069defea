import pytest
import yaml

from fractals.config import Julia, Mandelbrot, Multibrot, Phoenix
from fractals.plane import ViewConfig
from fractals.settings import Session, dict_to_session, load_session, save_session, session_to_dict


@pytest.mark.parametrize(
    "fractal",
    [
        Mandelbrot(),
        Julia(max_iterations=300, parameter=complex(-0.8, 0.156)),
        Multibrot(escape_threshold=6.0, exponent=5.5),
        Phoenix(parameter=complex(0.5667, -0.5)),
    ],
)
def test_session_survives_yaml_file(tmp_path, fractal):
    session = Session(
        fractal=fractal,
        view=ViewConfig(center=complex(-0.74, 0.13), zoom_scale=2500.0, rotation_degrees=45.0),
        palette="rainbow",
        shift=0.35,
    )
    path = save_session(tmp_path / "saves" / "session.yaml", session)
    assert path.is_file()
    assert load_session(path) == session


def test_session_dict_layout():
    settings = session_to_dict(Session(fractal=Julia(parameter=complex(0.1, -0.2))))
    assert settings["fractal"] == {
        "kind": "julia",
        "max_iterations": 64,
        "escape_threshold": 4.0,
        "parameter": {"re": 0.1, "im": -0.2},
    }
    assert settings["view"]["center"] == {"re": -0.5, "im": 0.0}
    assert settings["presentation"] == {"palette": "electric", "shift": 0.0}


def test_missing_sections_fall_back_to_defaults():
    session = dict_to_session({"fractal": {"kind": "tricorn"}})
    assert session.fractal.kind.value == "tricorn"
    assert session.view == ViewConfig()
    assert session.palette == "electric"


def test_saved_file_is_plain_yaml(tmp_path):
    path = save_session(tmp_path / "plain.yaml", Session())
    with path.open() as file:
        data = yaml.safe_load(file)
    assert data["fractal"]["kind"] == "mandelbrot"


@pytest.mark.parametrize(
    "settings",
    [
        {},
        {"fractal": {}},
        {"fractal": {"kind": "koch"}},
        {"fractal": {"kind": "julia", "parameter": {"re": 1.0}}},
        {"fractal": {"kind": "mandelbrot"}, "view": {"center": 3}},
    ],
)
def test_malformed_settings_are_rejected(settings):
    with pytest.raises(ValueError):
        dict_to_session(settings)


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_session(path)


@pytest.mark.parametrize(
    "fractal",
    [
        {"kind": "mandelbrot", "max_iterations": 2.5},
        {"kind": "mandelbrot", "max_iterations": "lots"},
        {"kind": "mandelbrot", "escape_threshold": "far"},
        {"kind": "multibrot", "exponent": "three"},
    ],
)
def test_mistyped_fractal_options_are_rejected(fractal):
    with pytest.raises(ValueError):
        dict_to_session({"fractal": fractal})


def test_mistyped_iteration_limit_in_file_is_rejected(tmp_path):
    path = tmp_path / "fractional.yaml"
    path.write_text("fractal:\n  kind: mandelbrot\n  max_iterations: 2.5\n")
    with pytest.raises(ValueError):
        load_session(path)
