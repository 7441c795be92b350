"""
Configuration module for the BugX debugging toolkit.

This module provides configuration classes for the workflow phases,
analysis thresholds, logging and the database bootstrap.
"""

from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ValidationFailure


class TeamIntegrationUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    notify_on_critical: Optional[bool] = None
    share_patterns: Optional[bool] = None
    require_reviews: Optional[bool] = None


class WorkflowConfigUpdate(BaseModel):
    """Partial workflow configuration; unknown keys are rejected."""
    model_config = ConfigDict(extra="forbid")

    time_target: Optional[float] = Field(None, gt=0, description="Target resolution time in minutes")
    ai_assisted: Optional[bool] = None
    metrics_enabled: Optional[bool] = None
    prevention_required: Optional[bool] = None
    documentation_required: Optional[bool] = None
    pattern_recognition_enabled: Optional[bool] = None
    team_integration: Optional[TeamIntegrationUpdate] = None


def validate_workflow_overrides(overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check a partial workflow configuration and return only the given settings.

    Raises:
        ValidationFailure: on unknown keys, wrong types or a non-positive time target
    """
    try:
        update = WorkflowConfigUpdate.model_validate(overrides)
    except ValidationError as e:
        raise ValidationFailure.from_validation_error(e) from e
    return update.model_dump(exclude_none=True)


@dataclass
class TeamIntegrationConfig:
    """Configuration for team knowledge sharing."""
    notify_on_critical: bool = True
    share_patterns: bool = True
    require_reviews: bool = False


@dataclass
class WorkflowConfig:
    """Configuration for which workflow phases run."""
    time_target: float = 4.5  # minutes
    ai_assisted: bool = True
    metrics_enabled: bool = True
    prevention_required: bool = True
    documentation_required: bool = True
    pattern_recognition_enabled: bool = True
    team_integration: TeamIntegrationConfig = field(default_factory=TeamIntegrationConfig)

    def merged(self, overrides: Optional[Dict[str, Any]] = None) -> 'WorkflowConfig':
        """Return a copy with the given overrides applied.

        ``team_integration`` may be given as a partial dictionary; it is
        merged into the current team settings rather than replacing them.

        Raises:
            ValidationFailure: if the overrides are not valid workflow settings
        """
        if not overrides:
            return replace(self, team_integration=replace(self.team_integration))

        overrides = dict(overrides)
        if isinstance(overrides.get('team_integration'), TeamIntegrationConfig):
            overrides['team_integration'] = asdict(overrides['team_integration'])

        updates = validate_workflow_overrides(overrides)
        team = updates.pop('team_integration', None)
        team_config = replace(self.team_integration, **(team or {}))

        return replace(self, team_integration=team_config, **updates)


@dataclass
class AnalysisConfig:
    """Thresholds used by pattern recognition and template selection."""
    min_match_confidence: int = 20
    high_confidence_threshold: int = 80
    template_confidence_threshold: int = 70
    max_relevant_knowledge: int = 3
    quick_fix_baseline_minutes: float = 10.0


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    log_level: str = "INFO"
    log_file: Optional[str] = None
    enable_console_logging: bool = True
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def __post_init__(self):
        """Load log level from environment and ensure log directory exists."""
        env_level = os.getenv("BUGX_LOG_LEVEL")
        if env_level:
            self.log_level = env_level.upper()

        if self.log_file:
            Path(self.log_file).parent.mkdir(parents=True, exist_ok=True)


@dataclass
class DatabaseConfig:
    """Configuration for the database bootstrap."""
    url: Optional[str] = None
    min_pool_size: int = 1
    max_pool_size: int = 10
    idle_timeout: float = 30.0
    connect_timeout: float = 10.0
    ssl_required: Optional[bool] = None
    max_init_attempts: Optional[int] = None

    def __post_init__(self):
        """Load connection settings from environment if not provided."""
        if self.url is None:
            self.url = os.getenv("POSTGRES_URL")

        # Hosted databases and serverless deployments need SSL and a single connection
        if self.ssl_required is None:
            self.ssl_required = self.is_hosted

        if self.is_hosted:
            self.max_pool_size = 1
            self.min_pool_size = 1
            self.idle_timeout = 20.0
            self.connect_timeout = 5.0

    @property
    def is_hosted(self) -> bool:
        return bool(self.url and "supabase" in self.url) or bool(os.getenv("VERCEL"))


@dataclass
class BugXConfig:
    """Main configuration class for the BugX toolkit."""
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    debug_mode: bool = False

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'BugXConfig':
        """Create configuration from dictionary."""
        workflow_config = WorkflowConfig().merged(config_dict.get('workflow', {}))
        analysis_config = AnalysisConfig(**config_dict.get('analysis', {}))
        logging_config = LoggingConfig(**config_dict.get('logging', {}))
        database_config = DatabaseConfig(**config_dict.get('database', {}))

        # Extract top-level settings
        system_settings = {k: v for k, v in config_dict.items()
                           if k not in ['workflow', 'analysis', 'logging', 'database']}

        return cls(
            workflow=workflow_config,
            analysis=analysis_config,
            logging=logging_config,
            database=database_config,
            **system_settings
        )

    @classmethod
    def from_file(cls, config_path: str) -> 'BugXConfig':
        """Load configuration from JSON or YAML file."""
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() == '.json':
                config_dict = json.load(f)
            elif path.suffix.lower() in ['.yml', '.yaml']:
                import yaml
                config_dict = yaml.safe_load(f) or {}
            else:
                raise ValueError(f"Unsupported configuration file format: {path.suffix}")

        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def validate(self) -> List[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if self.workflow.time_target <= 0:
            issues.append("time_target must be positive")

        for name in ('min_match_confidence', 'high_confidence_threshold',
                     'template_confidence_threshold'):
            value = getattr(self.analysis, name)
            if not 0 <= value <= 100:
                issues.append(f"{name} must be between 0 and 100")

        if self.analysis.max_relevant_knowledge < 0:
            issues.append("max_relevant_knowledge must not be negative")

        if self.database.min_pool_size > self.database.max_pool_size:
            issues.append("min_pool_size cannot exceed max_pool_size")

        if self.database.max_init_attempts is not None and self.database.max_init_attempts <= 0:
            issues.append("max_init_attempts must be positive")

        return issues
