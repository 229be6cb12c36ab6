from .context import HarnessContext as HarnessContext
from .engine import HarnessEngine as HarnessEngine
from .error_filter import filter_failures as filter_failures
from .failure_store import FailureStore as FailureStore
from .join_set import JoinSet as JoinSet
