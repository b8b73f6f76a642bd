from .step_10_probe_platform import ProbePlatformStep
from .step_15_update_repository import UpdateRepositoryStep
from .step_20_ensure_homebrew import EnsureHomebrewStep
from .step_30_install_packages import InstallPackagesStep
from .step_35_change_shell import ChangeShellStep
from .step_40_sync_dotfiles import SyncDotfilesStep
from .step_50_apply_settings import ApplySettingsStep
from .step_60_post_fixups import PostFixupsStep

__all__ = [
    "ProbePlatformStep",
    "UpdateRepositoryStep",
    "EnsureHomebrewStep",
    "InstallPackagesStep",
    "ChangeShellStep",
    "SyncDotfilesStep",
    "ApplySettingsStep",
    "PostFixupsStep",
]
