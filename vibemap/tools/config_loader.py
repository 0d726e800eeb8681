"""
Configuration loader for clustering profiles and environment variables.
"""

import os
from pathlib import Path
from typing import Dict, Any, List, Optional
import yaml


class ConfigLoader:
    """Load clustering profiles from YAML files and the environment."""
    
    CONFIG_DIR = Path(__file__).parent.parent.parent / "configs"
    DEFAULT_PROFILE = "default"
    ENV_VAR = "VIBEMAP_PROFILE"
    
    @classmethod
    def available_profiles(cls) -> List[str]:
        """Names of the profiles shipped in ``CONFIG_DIR``."""
        return sorted(f.stem for f in cls.CONFIG_DIR.glob("*.yaml"))
    
    @classmethod
    def load_cluster_profile(cls, profile_name: str = DEFAULT_PROFILE) -> Dict[str, Any]:
        """
        Load a clustering profile.
        
        Args:
            profile_name: Name of the profile (default, dense-map, sparse-map)
            
        Returns:
            Dictionary with configuration values
            
        Raises:
            FileNotFoundError: If profile doesn't exist
        """
        profile_path = cls.CONFIG_DIR / f"{profile_name}.yaml"
        
        if not profile_path.exists():
            raise FileNotFoundError(
                f"Profile '{profile_name}' not found. "
                f"Available profiles: {', '.join(cls.available_profiles())}"
            )
        
        with open(profile_path, "r") as f:
            return yaml.safe_load(f) or {}
    
    @classmethod
    def get_profile_from_env(cls) -> Optional[str]:
        """Get profile name from the VIBEMAP_PROFILE environment variable."""
        return os.getenv(cls.ENV_VAR)
    
    @classmethod
    def load_default_or_env_profile(cls) -> Dict[str, Any]:
        """
        Load the profile named in the environment, or the default profile.
        
        Returns:
            Configuration dictionary
        """
        profile = cls.get_profile_from_env() or cls.DEFAULT_PROFILE
        return cls.load_cluster_profile(profile)


def get_config() -> Dict[str, Any]:
    """Convenience function to get current configuration."""
    return ConfigLoader.load_default_or_env_profile()
