"""
Migration Tables.

Immutable descriptors for the legacy proxy API surface and its replacement:

- ``HOOK_RULES``: proxy hooks (``trpc.path.useQuery``) and the options producer
  that replaces them, plus the library the bare hook is imported from.
- ``UTIL_METHODS``: deprecated ``utils`` proxy methods and the caching client
  method they map to.
"""

from types import MappingProxyType
from typing import Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field

REACT_QUERY = "@tanstack/react-query"
TRPC_REACT_QUERY = "@trpc/tanstack-react-query"


class HookRule(BaseModel):
  """
  Maps a proxy hook to its options producer.
  """

  model_config = ConfigDict(frozen=True)

  hook: str = Field(..., description="Hook name called through the proxy (e.g. 'useQuery').")
  producer: str = Field(..., description="Options producer replacing the hook on the proxy.")
  library: str = Field(..., description="Module the bare hook is imported from.")


HOOK_RULES: Tuple[HookRule, ...] = (
  HookRule(hook="useQuery", producer="queryOptions", library=REACT_QUERY),
  HookRule(hook="useSuspenseQuery", producer="queryOptions", library=REACT_QUERY),
  HookRule(hook="useInfiniteQuery", producer="infiniteQueryOptions", library=REACT_QUERY),
  HookRule(hook="useSuspenseInfiniteQuery", producer="infiniteQueryOptions", library=REACT_QUERY),
  HookRule(hook="useMutation", producer="mutationOptions", library=REACT_QUERY),
  HookRule(hook="useSubscription", producer="subscriptionOptions", library=TRPC_REACT_QUERY),
)

# setMutationDefaults, getMutationDefaults and isMutating have no equivalent
# filter-based call and stay unmapped.
UTIL_METHODS: Mapping[str, str] = MappingProxyType(
  {
    "fetch": "fetchQuery",
    "fetchInfinite": "fetchInfiniteQuery",
    "prefetch": "prefetchQuery",
    "prefetchInfinite": "prefetchInfiniteQuery",
    "ensureData": "ensureQueryData",
    "invalidate": "invalidateQueries",
    "reset": "resetQueries",
    "refetch": "refetchQueries",
    "cancel": "cancelQuery",
    "setData": "setQueryData",
    "setQueriesData": "setQueriesData",
    "setInfiniteData": "setInfiniteQueryData",
    "getData": "getQueryData",
    "getInfiniteData": "getInfiniteQueryData",
  }
)

PROXY_ACCESSORS = frozenset({"useContext", "useUtils"})

SUSPENSE_HOOKS = frozenset({"useSuspenseQuery", "useSuspenseInfiniteQuery"})
