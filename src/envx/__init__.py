from envx.descriptors import (
    DescriptorAction,
    DescriptorPlan,
    clone_descriptor,
    ensure_baseline,
    plan_descriptor,
    render_descriptor,
    write_descriptor,
)
from envx.detect import ProjectKind, detect_project_kind
from envx.errors import (
    ConfigError,
    EnvFileError,
    EnvxError,
    ManifestError,
    ManifestNotFoundError,
    ProjectNotFoundError,
)
from envx.manifest import (
    ProjectInfo,
    resolve_project_info,
    update_legacy_manifest,
    update_modern_manifest,
)
from envx.paths import descriptor_path, environments_dir, find_clone_source
from envx.values import parse_pairs, parse_scalar, sanitize_folder

__version__ = "0.2.0"

__all__ = [
    "ConfigError",
    "EnvFileError",
    "DescriptorAction",
    "DescriptorPlan",
    "EnvxError",
    "ManifestError",
    "ManifestNotFoundError",
    "ProjectInfo",
    "ProjectKind",
    "ProjectNotFoundError",
    "__version__",
    "clone_descriptor",
    "descriptor_path",
    "detect_project_kind",
    "ensure_baseline",
    "environments_dir",
    "find_clone_source",
    "parse_pairs",
    "parse_scalar",
    "plan_descriptor",
    "render_descriptor",
    "resolve_project_info",
    "sanitize_folder",
    "update_legacy_manifest",
    "update_modern_manifest",
    "write_descriptor",
]
