"""
Run configuration.

Everything a capture run needs is collected into a frozen RunConfig before
the run starts. Options come from the command line, falling back to an
``html-sketchapp.config.json`` file found in the working directory or one of
its parents.
"""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from .errors import ConfigurationError
from .targets import Target, resolve_target

CONFIG_FILENAME = 'html-sketchapp.config.json'

DEFAULT_VIEWPORTS = {'Desktop': '1024x768'}
DEFAULT_SCRIPT = Path(__file__).resolve().parent / 'scripts' / 'page2layers.bundle.js'
DEFAULT_ENTRY = 'page2layers.run()'

WAIT_UNTIL_CHOICES = ('load', 'domcontentloaded', 'networkidle0', 'networkidle2')
DEFAULT_WAIT_UNTIL = 'networkidle2'
DEFAULT_NAVIGATION_TIMEOUT = 30.0

VIEWPORT_PATTERN = re.compile(r'^(\d+)x(\d+)(?:@(\d+(?:\.\d+)?|\.\d+))?$')


@dataclass(frozen=True)
class ViewportSpec:
    """
    A viewport size, written ``<width>x<height>[@<scale>]``.

    ``spec`` keeps the string the viewport was parsed from; output files
    are named after it.
    """
    width: int
    height: int
    scale: float = 1.0
    spec: str = ''

    @classmethod
    def parse(cls, text: str) -> 'ViewportSpec':
        """Parse ``WxH`` or ``WxH@S``."""
        spec = str(text).strip()
        match = VIEWPORT_PATTERN.match(spec)
        if not match:
            raise ConfigurationError(
                f"Invalid viewport '{text}': expected <width>x<height>[@<scale>], e.g. 1024x768@2"
            )

        width, height, scale = match.groups()
        parsed = cls(
            width=int(width),
            height=int(height),
            scale=float(scale) if scale is not None else 1.0,
            spec=spec,
        )

        if parsed.width <= 0 or parsed.height <= 0:
            raise ConfigurationError(f"Invalid viewport '{text}': width and height must be positive")
        if parsed.scale <= 0:
            raise ConfigurationError(f"Invalid viewport '{text}': scale must be positive")

        return parsed

    @property
    def key(self) -> str:
        """Output key used in file names."""
        if self.spec:
            return self.spec
        if self.scale == 1:
            return f"{self.width}x{self.height}"
        return f"{self.width}x{self.height}@{self.scale:g}"

    def to_pyppeteer(self) -> dict:
        return {
            'width': self.width,
            'height': self.height,
            'deviceScaleFactor': self.scale,
        }

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class LaunchOptions:
    """How to start Chromium and when to consider the page loaded."""
    args: tuple[str, ...] = ()
    executable_path: Optional[Path] = None
    user_data_dir: Optional[Path] = None
    wait_until: str = DEFAULT_WAIT_UNTIL
    navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT

    def __post_init__(self):
        if self.wait_until not in WAIT_UNTIL_CHOICES:
            raise ConfigurationError(
                f"Invalid wait-until '{self.wait_until}': choose one of {', '.join(WAIT_UNTIL_CHOICES)}"
            )
        if self.navigation_timeout <= 0:
            raise ConfigurationError("Navigation timeout must be positive")


@dataclass(frozen=True)
class RunConfig:
    """The resolved inputs of one capture run."""
    target: Target
    out_dir: Path
    serve_dir: Optional[Path] = None
    viewports: Mapping[str, ViewportSpec] = field(
        default_factory=lambda: parse_viewports(DEFAULT_VIEWPORTS)
    )
    debug: bool = False
    launch: LaunchOptions = field(default_factory=LaunchOptions)
    extractor_script: Path = DEFAULT_SCRIPT
    extractor_entry: str = DEFAULT_ENTRY
    symbol_middleware: Optional[Path] = None
    extract_timeout: Optional[float] = None

    @property
    def serving(self) -> bool:
        return self.serve_dir is not None


def parse_viewports(viewports: Mapping[str, Any]) -> dict[str, ViewportSpec]:
    """Parse a name -> spec string mapping, keeping insertion order."""
    parsed: dict[str, ViewportSpec] = {}
    for name, spec in viewports.items():
        if not name:
            raise ConfigurationError(f"Viewport '{spec}' has no name")
        parsed[name] = spec if isinstance(spec, ViewportSpec) else ViewportSpec.parse(spec)
    return parsed


def parse_viewport_options(values: Optional[list[str]]) -> dict[str, str]:
    """Turn repeated ``NAME=SPEC`` options into a mapping."""
    if not values:
        return dict(DEFAULT_VIEWPORTS)

    viewports: dict[str, str] = {}
    for value in values:
        name, sep, spec = value.partition('=')
        if not sep or not name.strip() or not spec.strip():
            raise ConfigurationError(f"Invalid viewport option '{value}': expected NAME=WIDTHxHEIGHT[@SCALE]")
        viewports[name.strip()] = spec.strip()
    return viewports


def split_args(value: Optional[str]) -> tuple[str, ...]:
    """Split a space-separated Chromium argument string."""
    if not value:
        return ()
    return tuple(arg for arg in value.split(' ') if arg)


def build_run_config(
    out_dir: str | Path,
    serve: Optional[str] = None,
    url: Optional[str] = None,
    file: Optional[str] = None,
    viewports: Optional[Mapping[str, Any]] = None,
    debug: bool = False,
    symbol_middleware: Optional[str] = None,
    puppeteer_args: Optional[str] = None,
    puppeteer_executable_path: Optional[str] = None,
    puppeteer_user_data_dir: Optional[str] = None,
    puppeteer_wait_until: str = DEFAULT_WAIT_UNTIL,
    navigation_timeout: float = DEFAULT_NAVIGATION_TIMEOUT,
    extract_timeout: Optional[float] = None,
    extractor_script: Optional[str] = None,
    extractor_entry: str = DEFAULT_ENTRY,
) -> RunConfig:
    """
    Build a RunConfig from option values.

    Paths are resolved against the working directory. All validation
    happens here, before any server or browser is started.

    Raises:
        ConfigurationError: on a missing target, bad viewport or bad option
    """
    if not out_dir:
        raise ConfigurationError("An output directory is required")

    target = resolve_target(serve=serve, url=url, file=file)

    if extract_timeout is not None and extract_timeout <= 0:
        raise ConfigurationError("Extract timeout must be positive")

    return RunConfig(
        target=target,
        out_dir=Path(out_dir).resolve(),
        serve_dir=Path(serve).resolve() if serve else None,
        viewports=parse_viewports(viewports or DEFAULT_VIEWPORTS),
        debug=debug,
        launch=LaunchOptions(
            args=split_args(puppeteer_args),
            executable_path=Path(puppeteer_executable_path) if puppeteer_executable_path else None,
            user_data_dir=Path(puppeteer_user_data_dir) if puppeteer_user_data_dir else None,
            wait_until=puppeteer_wait_until,
            navigation_timeout=navigation_timeout,
        ),
        extractor_script=Path(extractor_script).resolve() if extractor_script else DEFAULT_SCRIPT,
        extractor_entry=extractor_entry,
        symbol_middleware=Path(symbol_middleware).resolve() if symbol_middleware else None,
        extract_timeout=extract_timeout,
    )


# ============================================================================
# Config files
# ============================================================================


def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """Look for the config file in ``start`` and each of its parents."""
    directory = (start or Path.cwd()).resolve()
    for candidate in [directory, *directory.parents]:
        path = candidate / CONFIG_FILENAME
        if path.is_file():
            return path
    return None


def _option_name(key: str) -> str:
    """Normalize ``outDir`` / ``out-dir`` / ``out_dir`` to ``out_dir``."""
    key = re.sub(r'(?<=[a-z0-9])([A-Z])', r'_\1', key)
    return key.replace('-', '_').lower()


def load_config_file(path: Path) -> dict[str, Any]:
    """
    Read a JSON config file into option defaults.

    Keys are option names in any of kebab, snake or camel case. The
    ``viewports`` object is turned into ``NAME=SPEC`` strings, matching the
    repeated ``--viewport`` option.

    Raises:
        ConfigurationError: if the file is unreadable or not a JSON object
    """
    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")

    defaults: dict[str, Any] = {}
    for key, value in data.items():
        name = _option_name(key)
        if name == 'viewports':
            if not isinstance(value, dict):
                raise ConfigurationError(f"'viewports' in {path} must be an object of name: spec")
            defaults['viewports'] = [f"{n}={s}" for n, s in value.items()]
        else:
            defaults[name] = value

    return defaults
