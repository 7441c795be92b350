"""
Static catalog of error signatures and anti-pattern rules.

Signatures describe the textual markers of a known error category and name
the fix template (``error_type``) that resolves it. Anti-pattern rules
describe code constructs that cause defects regardless of the error being
investigated. Catalog order matters: it breaks confidence ties.
"""

from typing import List

from .models import AntiPattern, PatternSignature, Severity


SCRIPT_FILES = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")
COMPONENT_FILES = (".jsx", ".tsx", ".js", ".ts")


PATTERN_SIGNATURES: List[PatternSignature] = [
    PatternSignature(
        id="hydration_mismatch",
        name="Hydration Mismatch",
        category="hydration",
        error_type="hydration_error",
        keywords=frozenset({
            "hydration", "server rendered", "did not match",
            "text content does not match", "hydrating",
        }),
        matchers=(
            r"hydration (failed|error|mismatch)",
            r"(text content|server.rendered).{0,40}(did not|does not) match",
        ),
        context_clues=frozenset({
            "math.random", "date.now", "new date(", "usestate",
            "typeof window", "localstorage", "use client",
        }),
        recommendation="Render static initial values on the server and move "
                       "non-deterministic values into useEffect after mount",
    ),
    PatternSignature(
        id="temporal_dead_zone",
        name="Temporal Dead Zone Scope Error",
        category="scope",
        error_type="scope_error",
        keywords=frozenset({
            "cannot access", "before initialization", "is not defined",
            "referenceerror",
        }),
        matchers=(
            r"cannot access ['\"]?\w+['\"]? before initialization",
        ),
        context_clues=frozenset({"const ", "let ", "=>", "usecallback", "usememo"}),
        recommendation="Declare functions and constants before the code that "
                       "uses them, or convert arrow functions to hoisted declarations",
    ),
    PatternSignature(
        id="null_reference",
        name="Null or Undefined Reference",
        category="null_reference",
        error_type="null_reference",
        keywords=frozenset({
            "cannot read properties of undefined",
            "cannot read properties of null", "undefined", "null",
            "is not a function",
        }),
        matchers=(
            r"cannot read propert(y|ies) of (undefined|null)",
            r"\b\w+ is (undefined|null)\b",
        ),
        context_clues=frozenset({"?.", "props.", ".map(", "data."}),
        recommendation="Guard optional values with optional chaining or early "
                       "returns and provide defaults for loading states",
    ),
    PatternSignature(
        id="api_integration",
        name="API Integration Failure",
        category="api",
        error_type="api_integration",
        keywords=frozenset({
            "cors", "fetch", "failed to fetch", "network error",
            "access-control-allow-origin", "status code",
        }),
        matchers=(
            r"blocked by cors policy",
            r"failed to fetch",
            r"status (code )?[45]\d\d",
        ),
        context_clues=frozenset({"fetch(", "axios", "api/", "headers"}),
        recommendation="Check the endpoint URL, CORS headers and response "
                       "status handling; wrap the call with explicit error handling",
    ),
    PatternSignature(
        id="validation_error",
        name="Input Validation Failure",
        category="validation",
        error_type="validation_error",
        keywords=frozenset({
            "validation", "invalid", "zoderror", "required", "expected string",
        }),
        matchers=(
            r"validation (failed|error)",
            r"invalid (input|email|value|type)",
        ),
        context_clues=frozenset({"z.object", "schema", "safeparse", "formdata"}),
        recommendation="Validate input against the schema at the boundary and "
                       "surface field-level messages to the user",
    ),
    PatternSignature(
        id="database_connection",
        name="Database Connection Failure",
        category="database",
        error_type="database_connection",
        keywords=frozenset({
            "database", "econnrefused", "connection refused", "postgres",
            "does not exist", "connection terminated",
        }),
        matchers=(
            r"relation \"?\w+\"? does not exist",
            r"(econnrefused|connection (refused|terminated|timed out))",
        ),
        context_clues=frozenset({
            "db.", "drizzle", "postgres(", "select(", "ensuredatabaseinitialized",
        }),
        recommendation="Verify the connection string and run the schema setup "
                       "before serving queries; fall back to a degraded mode when unavailable",
    ),
    PatternSignature(
        id="environment_config",
        name="Missing Environment Configuration",
        category="environment",
        error_type="environment_config",
        keywords=frozenset({
            "environment variable", "is not set", "process.env",
            "auth_secret", "postgres_url",
        }),
        matchers=(
            r"environment variable.{0,40}(not set|missing|required)",
            r"\b(?-i:[A-Z][A-Z0-9_]{3,})\b (is not set|is required)",
        ),
        context_clues=frozenset({"process.env", ".env", "dotenv"}),
        recommendation="Define the variable in every deployment environment and "
                       "validate configuration once at startup",
    ),
    PatternSignature(
        id="server_render_exception",
        name="Server-Side Render Exception",
        category="server_rendering",
        error_type="generic_error",
        keywords=frozenset({
            "server-side exception", "server components render",
            "internal server error",
        }),
        matchers=(
            r"server.side exception",
            r"error occurred in the server components render",
        ),
        context_clues=frozenset({"async function", "await", "cookies()", "headers()"}),
        recommendation="Inspect the server logs for the underlying exception; "
                       "check database and environment configuration first",
    ),
]


ANTI_PATTERN_LIBRARY: List[AntiPattern] = [
    # Hydration
    AntiPattern(
        id="no-random-in-state",
        name="Non-deterministic value in state initializer",
        category="hydration",
        severity=Severity.HIGH,
        detectors=(
            r"useState\s*\([^;\n]*Math\.random\s*\(",
            r"useState\s*\([^;\n]*\bcrypto\.randomUUID\s*\(",
        ),
        impact="Server and client render different initial values, causing hydration mismatches",
        solution="Use a static initial value and set the random value in useEffect after mount",
        file_extensions=COMPONENT_FILES,
    ),
    AntiPattern(
        id="no-date-in-state",
        name="Time-dependent value in state initializer",
        category="hydration",
        severity=Severity.HIGH,
        detectors=(r"useState\s*\([^;\n]*(Date\.now\s*\(|new Date\s*\()",),
        impact="Server and client capture different timestamps during the first render",
        solution="Initialize with a fixed value and read the clock on the client in useEffect",
        file_extensions=COMPONENT_FILES,
    ),
    AntiPattern(
        id="no-browser-api-in-state",
        name="Browser-only API in state initializer",
        category="hydration",
        severity=Severity.HIGH,
        detectors=(r"useState\s*\([^;\n]*\b(window|localStorage|sessionStorage|document|navigator)\.",),
        impact="Browser globals are undefined on the server and diverge on the client",
        solution="Read browser APIs inside useEffect once the component is mounted",
        file_extensions=COMPONENT_FILES,
    ),
    AntiPattern(
        id="no-random-in-render",
        name="Non-deterministic value rendered directly",
        category="hydration",
        severity=Severity.MEDIUM,
        detectors=(r">\s*\{[^{}\n]*Math\.random\s*\(",),
        impact="Rendered markup differs between server and client",
        solution="Render from state that is populated on the client",
        file_extensions=COMPONENT_FILES,
    ),
    AntiPattern(
        id="no-window-branch-in-render",
        name="Environment branch during render",
        category="hydration",
        severity=Severity.MEDIUM,
        detectors=(r"typeof window\s*[!=]==?\s*['\"]undefined['\"]\s*\?",),
        impact="Server and client take different branches while rendering",
        solution="Track an isClient flag set in useEffect instead of branching on window",
        file_extensions=COMPONENT_FILES,
    ),
    AntiPattern(
        id="suppressed-hydration-warning",
        name="Suppressed hydration warning",
        category="hydration",
        severity=Severity.LOW,
        detectors=(r"suppressHydrationWarning",),
        impact="Real mismatches are hidden instead of fixed",
        solution="Remove the suppression once the mismatch source is fixed",
        file_extensions=COMPONENT_FILES,
    ),
    # State management
    AntiPattern(
        id="direct-state-mutation",
        name="Direct state mutation",
        category="state",
        severity=Severity.HIGH,
        detectors=(r"\bthis\.state\.\w+\s*=[^=]", r"\bstate\.\w+\s*=[^=]"),
        impact="Updates bypass the renderer and leave the UI stale",
        solution="Produce a new state object through the setter",
        file_extensions=SCRIPT_FILES,
    ),
    AntiPattern(
        id="async-effect-callback",
        name="Async effect callback",
        category="state",
        severity=Severity.MEDIUM,
        detectors=(r"useEffect\s*\(\s*async\b",),
        impact="The effect returns a promise instead of a cleanup function",
        solution="Define an async function inside the effect and call it",
        file_extensions=COMPONENT_FILES,
    ),
    AntiPattern(
        id="effect-without-dependencies",
        name="Effect without dependency array",
        category="state",
        severity=Severity.MEDIUM,
        detectors=(r"useEffect\s*\(\s*\(\s*\)\s*=>\s*\{[^{}\n]*\}\s*\)",),
        impact="The effect re-runs after every render",
        solution="Declare the dependency array explicitly",
        file_extensions=COMPONENT_FILES,
    ),
    # Async handling
    AntiPattern(
        id="async-foreach",
        name="Async callback in forEach",
        category="async",
        severity=Severity.MEDIUM,
        detectors=(r"\.forEach\(\s*async\b",),
        impact="Promises are not awaited and errors go unobserved",
        solution="Use for...of with await or Promise.all over map",
        file_extensions=SCRIPT_FILES,
    ),
    AntiPattern(
        id="unhandled-promise",
        name="Promise chain without rejection handling",
        category="async",
        severity=Severity.MEDIUM,
        detectors=(r"\.then\([^;\n]*\)\s*;",),
        impact="Rejected promises surface as unhandled rejections",
        solution="Add a .catch handler or use try/await",
        file_extensions=SCRIPT_FILES,
    ),
    AntiPattern(
        id="empty-catch",
        name="Swallowed exception",
        category="async",
        severity=Severity.HIGH,
        detectors=(r"catch\s*(\(\s*\w*\s*\))?\s*\{\s*\}", r"except\s*(\w+\s*)?:\s*pass\b"),
        impact="Failures disappear without a trace",
        solution="Log the error and either recover explicitly or rethrow",
    ),
    # Security
    AntiPattern(
        id="hardcoded-secret",
        name="Hard-coded secret",
        category="security",
        severity=Severity.CRITICAL,
        detectors=(r"(api[_-]?key|secret|password|token)\s*[:=]\s*['\"][^'\"\s]{8,}['\"]",),
        impact="Credentials leak through source control and client bundles",
        solution="Load secrets from environment configuration",
    ),
    AntiPattern(
        id="dynamic-eval",
        name="Dynamic code evaluation",
        category="security",
        severity=Severity.CRITICAL,
        detectors=(r"\beval\s*\(", r"\bnew Function\s*\("),
        impact="Arbitrary code execution from untrusted input",
        solution="Replace evaluation with explicit parsing or lookup tables",
    ),
    AntiPattern(
        id="sql-string-concatenation",
        name="SQL built by string concatenation",
        category="security",
        severity=Severity.CRITICAL,
        detectors=(r"\b(SELECT|INSERT|UPDATE|DELETE)\b[^;\n]*['\"]\s*\+\s*\w+",),
        impact="SQL injection",
        solution="Use parameterized queries or the query builder",
    ),
    AntiPattern(
        id="unsanitized-inner-html",
        name="Unsanitized HTML injection",
        category="security",
        severity=Severity.HIGH,
        detectors=(r"dangerouslySetInnerHTML",),
        impact="Cross-site scripting when the HTML contains user input",
        solution="Sanitize the HTML or render structured content",
        file_extensions=COMPONENT_FILES,
    ),
    # Configuration
    AntiPattern(
        id="env-check-at-import",
        name="Environment check throws at import time",
        category="configuration",
        severity=Severity.MEDIUM,
        detectors=(r"^\s*if\s*\(\s*!\s*process\.env\.\w+\s*\)\s*throw\b",),
        impact="A missing variable crashes every route that imports the module",
        solution="Validate configuration lazily and report a clear startup error",
        file_extensions=SCRIPT_FILES,
    ),
]
