from .step_10_ensure_nala import EnsureNalaStep
from .step_20_upgrade_system import UpgradeSystemStep
from .step_30_install_drivers import InstallDriversStep
from .step_40_chrome_repository import ChromeRepositoryStep
from .step_50_remove_apparmor import RemoveAppArmorStep
from .step_60_disable_ufw import DisableFirewallStep
from .step_70_enable_ssh import EnableSshStep

__all__ = [
    "EnsureNalaStep",
    "UpgradeSystemStep",
    "InstallDriversStep",
    "ChromeRepositoryStep",
    "RemoveAppArmorStep",
    "DisableFirewallStep",
    "EnableSshStep",
]
