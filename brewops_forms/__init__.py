"""brewops-forms: Form validation and submission for BrewOps operations."""

__version__ = "0.1.0"

# These imports must come after __version__; the CLI imports it from here
from brewops_forms.core import SubmissionOutcome, SubmissionStatus
from brewops_forms.forms import FormController, FormDefinition, get_form

__all__ = [
    "__version__",
    "FormController",
    "FormDefinition",
    "SubmissionOutcome",
    "SubmissionStatus",
    "get_form",
]
