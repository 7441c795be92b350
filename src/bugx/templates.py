"""
Core Template System for the BugX toolkit.

Fix templates are keyed by error type. Each registry owns its own copies of
the templates, so usage counters are state of one registry instance and are
updated under a lock.
"""

import copy
import logging
import threading
from typing import Dict, List, Optional

from .errors import TemplateNotFoundError
from .models import PatternTemplate


logger = logging.getLogger(__name__)


PATTERN_TEMPLATES: Dict[str, PatternTemplate] = {
    "hydration_error": PatternTemplate(
        name="Hydration-Safe State Initialization",
        error_type="hydration_error",
        description="Server and client rendered different markup",
        steps=[
            "Locate state initializers that use random, time or browser-only values",
            "Replace the initial value with a static, serializable default",
            "Add an isClient flag set to true in a mount-only useEffect",
            "Assign the dynamic value inside useEffect once isClient is true",
            "Reload the page and confirm the hydration warning is gone",
        ],
        prevention=[
            "Lint rule: no Math.random(), Date.now() or window access in useState initializers",
            "Add a behavioral parity test comparing server and client output",
        ],
    ),
    "scope_error": PatternTemplate(
        name="Declaration Order Fix",
        error_type="scope_error",
        description="A binding was used inside its temporal dead zone",
        steps=[
            "Find the binding named in the error and its first use",
            "Move the declaration above every use, or convert it to a function declaration",
            "Check hooks and callbacks that close over the binding",
            "Re-run the failing path to confirm the ReferenceError is gone",
        ],
        prevention=[
            "Enable the no-use-before-define lint rule",
            "Keep helper definitions at the top of hooks and modules",
        ],
    ),
    "null_reference": PatternTemplate(
        name="Defensive Data Access",
        error_type="null_reference",
        description="A property was read from null or undefined",
        steps=[
            "Identify the value that is null or undefined at the failing line",
            "Trace where the value is loaded and when it can be missing",
            "Add optional chaining or an early return for the missing case",
            "Render a loading or empty state instead of dereferencing",
        ],
        prevention=[
            "Enable strict null checks in the type checker",
            "Give data-fetching hooks explicit loading and error states",
        ],
    ),
    "api_integration": PatternTemplate(
        name="Resilient API Call",
        error_type="api_integration",
        description="A network request failed or was blocked",
        steps=[
            "Reproduce the request and capture status code and response headers",
            "Verify the endpoint URL and method against the server route",
            "Configure CORS headers on the server for the calling origin",
            "Handle non-2xx responses and network errors explicitly in the client",
        ],
        prevention=[
            "Centralize API calls in one client with shared error handling",
            "Add contract tests for each endpoint the UI depends on",
        ],
    ),
    "validation_error": PatternTemplate(
        name="Boundary Validation",
        error_type="validation_error",
        description="Input did not satisfy the expected schema",
        steps=[
            "Identify the field and rule that rejected the input",
            "Compare the submitted payload with the schema definition",
            "Fix the form or client mapping that produced the invalid value",
            "Return field-level messages to the user instead of a generic failure",
        ],
        prevention=[
            "Share one schema between client and server validation",
            "Add tests for boundary values of every validated field",
        ],
    ),
    "database_connection": PatternTemplate(
        name="Database Availability Recovery",
        error_type="database_connection",
        description="The datastore was unreachable or its schema missing",
        steps=[
            "Confirm the connection string points at the intended database",
            "Run the schema setup so required tables and indexes exist",
            "Check pool limits and SSL settings for the deployment target",
            "Verify the failing query succeeds after setup",
        ],
        prevention=[
            "Initialize the schema once behind a single-flight guard",
            "Fall back to a degraded mode with a clear message when the database is down",
        ],
    ),
    "environment_config": PatternTemplate(
        name="Environment Configuration Check",
        error_type="environment_config",
        description="A required environment variable was missing",
        steps=[
            "List the variables the failing module reads",
            "Compare them with the deployment environment settings",
            "Add the missing values and redeploy",
            "Confirm the application starts without configuration errors",
        ],
        prevention=[
            "Validate required configuration at startup with a readable error",
            "Keep an example .env file in sync with the code",
        ],
    ),
}


class TemplateRegistry:
    """Registry of fix templates with usage statistics."""

    def __init__(self, templates: Optional[Dict[str, PatternTemplate]] = None):
        source = PATTERN_TEMPLATES if templates is None else templates
        self._templates: Dict[str, PatternTemplate] = copy.deepcopy(source)
        self._lock = threading.Lock()

    def get_template(self, error_type: str) -> PatternTemplate:
        """Get a snapshot of the template for an error type.

        Later usage does not change the returned copy.

        Raises:
            TemplateNotFoundError: if no template is registered for the type
        """
        with self._lock:
            template = self._templates.get(error_type)
            if template is None:
                raise TemplateNotFoundError(error_type, list(self._templates))
            return copy.deepcopy(template)

    def record_template_usage(self, error_type: str, success: bool) -> None:
        """Count one use of a template."""
        with self._lock:
            template = self._templates.get(error_type)
            if template is None:
                raise TemplateNotFoundError(error_type, list(self._templates))
            template.usage_count += 1
            if success:
                template.success_count += 1

    def add_template(self, template: PatternTemplate) -> None:
        """Register a template, replacing any existing one for the same type."""
        with self._lock:
            self._templates[template.error_type] = template

    def available_types(self) -> List[str]:
        return list(self._templates)

    def get_template_stats(self) -> Dict[str, Dict[str, float]]:
        """Usage statistics per error type."""
        with self._lock:
            return {
                error_type: {
                    "usage_count": t.usage_count,
                    "success_count": t.success_count,
                    "success_rate": round(t.success_count / t.usage_count * 100, 1)
                    if t.usage_count else 0.0,
                }
                for error_type, t in self._templates.items()
            }
