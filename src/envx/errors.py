from __future__ import annotations


class EnvxError(RuntimeError):
    pass


class ManifestNotFoundError(EnvxError):
    pass


class ManifestError(EnvxError):
    pass


class ProjectNotFoundError(EnvxError):
    pass


class ConfigError(EnvxError):
    pass


class EnvFileError(EnvxError):
    pass
