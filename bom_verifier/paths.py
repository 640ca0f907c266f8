
import os

class PathTraversalError(ValueError):
    """A component name resolved to a path outside the base directory."""

    def __init__(self, component_name: str, resolved_path: str, base_dir: str) -> None:
        super().__init__(
            f'Component "{component_name}" resolves to "{resolved_path}" '
            f'which is outside the base directory "{base_dir}"'
        )
        self.component_name = component_name
        self.resolved_path = resolved_path
        self.base_dir = base_dir

def resolve_component_path(base_dir: str, component_name: str) -> str:
    """
    Join a component name onto base_dir and normalize it.
    An absolute name replaces base_dir entirely; the result must still be
    base_dir itself or lie below base_dir + separator. No filesystem access.
    """
    full_base = os.path.abspath(base_dir)
    full_path = os.path.abspath(os.path.join(full_base, component_name))

    boundary = full_base if full_base.endswith(os.sep) else full_base + os.sep
    if not full_path.startswith(boundary) and full_path != full_base:
        raise PathTraversalError(component_name, full_path, full_base)
    return full_path
