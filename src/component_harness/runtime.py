# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Component runtime: instantiation entry point and update scheduler.

Components follow a create/update/destroy lifecycle:
1. ``__init__`` resolves declared ambient imports, runs ``setup()``, calls
   ``create()`` once to build DOM nodes and inserts them at the target
2. ``invalidate()``/``assign()`` mark props dirty; the scheduler batches
   dirty components and calls ``update(changed)`` on ``flush()``
3. ``destroy()`` runs destroy callbacks exactly once, destroys child
   components and removes the component's nodes

Mount callbacks run once the outermost component under construction has
been inserted, children before parents, so directives and listeners that
need a connected document see one.

Two-way binding: ``bind(prop, callback)`` registers a callback that fires
when the component itself assigns a new value to ``prop``. Values pushed
in from outside through ``set()`` never fire binding callbacks.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from .dom import CustomEvent, Element, Node
from .errors import HarnessError
from .mocks import RuntimeServices

logger = logging.getLogger(__name__)

Callback = Callable[[], Any]
SlotRenderer = Callable[[Node, Optional[Node], "Component"], List[Node]]

# Values compared by equality; anything else is always treated as changed
_IMMUTABLE_TYPES = (str, int, float, bool, bytes, tuple, frozenset, type(None))


def safe_not_equal(a: Any, b: Any) -> bool:
    """Whether assigning b over a counts as a change."""
    if isinstance(a, _IMMUTABLE_TYPES) and isinstance(b, _IMMUTABLE_TYPES):
        return bool(a != b)
    return True


class Scheduler:
    """Batches component updates until the next flush.

    NOT thread-safe: components and tests run on a single event loop.
    """

    DEFAULT_TICK_LIMIT = 100

    def __init__(self) -> None:
        self.tick_limit: int = self.DEFAULT_TICK_LIMIT
        self._dirty: List["Component"] = []
        self._flush_loop: Optional[asyncio.AbstractEventLoop] = None
        self._depth = 0
        self._pending_mounts: List["Component"] = []

    def schedule(self, component: "Component") -> None:
        if component not in self._dirty:
            self._dirty.append(component)
        self._request_flush()

    def discard(self, component: "Component") -> None:
        if component in self._dirty:
            self._dirty.remove(component)

    @property
    def pending(self) -> int:
        return len(self._dirty)

    def _request_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: updates wait for an explicit flush()
            return
        # Requests are per loop; one left on a closed loop never ran
        if self._flush_loop is loop:
            return
        self._flush_loop = loop
        loop.call_soon(self._scheduled_flush)

    def _scheduled_flush(self) -> None:
        self._flush_loop = None
        self.flush()

    def flush(self) -> None:
        """Run ``update`` on every dirty component until nothing is dirty.

        Raises:
            HarnessError: If updates keep re-dirtying components beyond
                ``tick_limit`` passes.
        """
        passes = 0
        while self._dirty:
            passes += 1
            if passes > self.tick_limit:
                stuck = ", ".join(type(c).__name__ for c in self._dirty)
                self._dirty.clear()
                raise HarnessError(
                    f"Reactive updates did not settle after {self.tick_limit} passes ({stuck})"
                )
            batch = list(self._dirty)
            self._dirty.clear()
            for component in batch:
                component._flush()

    async def tick(self) -> None:
        """Yield to the event loop, then flush pending updates."""
        await asyncio.sleep(0)
        self.flush()

    # Construction tracking -------------------------------------------------

    def enter(self) -> None:
        self._depth += 1

    def abort(self) -> None:
        self._depth -= 1
        if self._depth == 0:
            self._pending_mounts.clear()

    def leave(self, component: "Component") -> List["Component"]:
        """Record a finished construction.

        Returns:
            Components whose mount callbacks are now due (empty while an
            outer construction is still running).
        """
        self._depth -= 1
        self._pending_mounts.append(component)
        if self._depth > 0:
            return []
        due = list(self._pending_mounts)
        self._pending_mounts.clear()
        return due


scheduler = Scheduler()


def flush() -> None:
    scheduler.flush()


async def tick() -> None:
    await scheduler.tick()


class Component:
    """Base class for components.

    Subclasses declare ``defaults`` (prop name -> initial value) and
    optionally ``imports`` (ambient module -> symbol names), then override
    ``setup``, ``create`` and ``update``.

    Example:
        class Greeting(Component):
            defaults = {"name": "world"}

            def create(self):
                self.label = h("p", None, f"Hello {self.props['name']}")
                return [self.label]

            def update(self, changed):
                if "name" in changed:
                    self.label.text_content = f"Hello {self.props['name']}"
    """

    defaults: Dict[str, Any] = {}
    imports: Dict[str, Tuple[str, ...]] = {}

    def __init__(
        self,
        target: Node,
        props: Optional[Dict[str, Any]] = None,
        *,
        services: Optional[RuntimeServices] = None,
        context: Optional[Dict[Any, Any]] = None,
        slots: Optional[Dict[str, Optional[SlotRenderer]]] = None,
        anchor: Optional[Node] = None,
    ):
        """Instantiate and mount the component at target.

        Args:
            target: Node the component's top-level nodes are inserted into.
            props: Initial prop values (merged over ``defaults``).
            services: Runtime services used to resolve ``imports``.
            context: Context inherited from the parent component.
            slots: Slot name -> renderer; None marks a slot given as empty.
            anchor: Insert before this child of target instead of appending.

        Raises:
            MockResolutionError: If a declared import cannot be resolved.
        """
        self.target = target
        self.services = services if services is not None else RuntimeServices.empty()
        self.props: Dict[str, Any] = dict(self.defaults)
        for name, value in (props or {}).items():
            if name not in self.defaults:
                logger.warning(f"<{type(self).__name__}> was created with unknown prop '{name}'")
            self.props[name] = value

        self.modules = self.services.import_symbols(self.imports)

        self.nodes: List[Node] = []
        self.mounted = False
        self.destroyed = False
        self._context: Dict[Any, Any] = dict(context or {})
        self._slots: Dict[str, Optional[SlotRenderer]] = dict(slots or {})
        self._listeners: Dict[str, List[Callable[[CustomEvent], Any]]] = {}
        self._bindings: Dict[str, List[Callable[[Any], Any]]] = {}
        self._mount_callbacks: List[Callback] = []
        self._destroy_callbacks: List[Callback] = []
        self._children: List[Component] = []
        self._dirty: Set[str] = set()

        scheduler.enter()
        try:
            self.setup()
            self.nodes = list(self.create() or [])
            for node in self.nodes:
                target.insert_before(node, anchor)
        except BaseException:
            scheduler.abort()
            raise

        for component in scheduler.leave(self):
            component._run_mount_callbacks()
        logger.debug(f"Mounted <{type(self).__name__}> with props {sorted(self.props)}")

    # Lifecycle hooks ------------------------------------------------------

    def setup(self) -> None:
        """Initialise state and context before ``create`` runs."""

    def create(self) -> Iterable[Node]:
        """Build and return the component's top-level nodes."""
        return []

    def update(self, changed: Set[str]) -> None:
        """Patch the DOM for the changed prop names."""

    def on_mount(self, callback: Callback) -> None:
        """Run callback once mounted. A callable return value runs on destroy."""
        if self.mounted:
            self._call_mount_callback(callback)
        else:
            self._mount_callbacks.append(callback)

    def on_destroy(self, callback: Callback) -> None:
        """Run callback when the component is destroyed (registration order)."""
        if self.destroyed:
            callback()
        else:
            self._destroy_callbacks.append(callback)

    def _run_mount_callbacks(self) -> None:
        if self.destroyed:
            return
        self.mounted = True
        callbacks, self._mount_callbacks = self._mount_callbacks, []
        for callback in callbacks:
            self._call_mount_callback(callback)

    def _call_mount_callback(self, callback: Callback) -> None:
        result = callback()
        if callable(result):
            self._destroy_callbacks.append(result)

    def destroy(self) -> None:
        """Tear the component down. Safe to call more than once."""
        if self.destroyed:
            return
        self.destroyed = True
        scheduler.discard(self)

        errors: List[BaseException] = []
        callbacks, self._destroy_callbacks = self._destroy_callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Destroy callback of <{type(self).__name__}> failed: {e}")
                errors.append(e)

        for child in self._children:
            child.destroy()
        self._children.clear()

        for node in self.nodes:
            node.remove()
        self._listeners.clear()
        self._bindings.clear()
        logger.debug(f"Destroyed <{type(self).__name__}>")

        if errors:
            raise errors[0]

    # Props and reactivity -------------------------------------------------

    def set(self, props: Dict[str, Any]) -> None:
        """Push new prop values from outside (the ``$set`` entry point)."""
        for name, value in props.items():
            if safe_not_equal(self.props.get(name), value) or name not in self.props:
                self.props[name] = value
                self.invalidate(name)

    def assign(self, name: str, value: Any) -> None:
        """Change a prop from inside the component and notify its bindings."""
        if name in self.props and not safe_not_equal(self.props[name], value):
            return
        self.props[name] = value
        self.invalidate(name)
        for callback in list(self._bindings.get(name, [])):
            callback(value)

    def invalidate(self, name: str) -> None:
        if self.destroyed:
            return
        self._dirty.add(name)
        scheduler.schedule(self)

    def _flush(self) -> None:
        if self.destroyed or not self._dirty:
            return
        changed, self._dirty = self._dirty, set()
        self.update(changed)

    def bind(self, name: str, callback: Callable[[Any], Any]) -> Callable[[], None]:
        """Register a two-way binding callback for prop ``name``.

        Returns:
            Callable removing the binding.
        """
        callbacks = self._bindings.setdefault(name, [])
        callbacks.append(callback)

        def unbind() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return unbind

    # Component events -----------------------------------------------------

    def on(self, event: str, handler: Callable[[CustomEvent], Any]) -> Callable[[], None]:
        """Subscribe to a component event.

        Returns:
            Callable removing the handler.
        """
        handlers = self._listeners.setdefault(event, [])
        handlers.append(handler)

        def off() -> None:
            if handler in handlers:
                handlers.remove(handler)

        return off

    def dispatch(self, event: str, detail: Any = None) -> bool:
        """Call handlers for a component event.

        Returns:
            False if a handler called prevent_default(), True otherwise.
        """
        custom_event = CustomEvent(event, detail=detail, cancelable=True)
        for handler in list(self._listeners.get(event, [])):
            handler(custom_event)
        return not custom_event.default_prevented

    # Context --------------------------------------------------------------

    def set_context(self, key: Any, value: Any) -> Any:
        self._context[key] = value
        return value

    def get_context(self, key: Any, default: Any = None) -> Any:
        return self._context.get(key, default)

    def has_context(self, key: Any) -> bool:
        return key in self._context

    # Children and slots ---------------------------------------------------

    def mount_child(
        self,
        component: type,
        parent: Node,
        props: Optional[Dict[str, Any]] = None,
        *,
        slots: Optional[Dict[str, Optional[SlotRenderer]]] = None,
        anchor: Optional[Node] = None,
    ) -> "Component":
        """Instantiate a child component sharing this component's services and context."""
        child = component(
            parent,
            props,
            services=self.services,
            context=self._context,
            slots=slots,
            anchor=anchor,
        )
        self._children.append(child)
        return child

    def has_slot(self, name: str = "default") -> bool:
        return name in self._slots

    def render_slot(
        self,
        name: str,
        parent: Node,
        anchor: Optional[Node] = None,
        fallback: Optional[Callable[[Node], Any]] = None,
    ) -> bool:
        """Project caller content for slot ``name`` into parent.

        Falls back to ``fallback(parent)`` when the caller gave no content
        for the slot. A slot given explicitly as empty renders nothing.

        Returns:
            True if caller content was rendered.
        """
        if name not in self._slots:
            if fallback is not None:
                fallback(parent)
            return False

        renderer = self._slots[name]
        if renderer is None:
            return False

        nodes = renderer(parent, anchor, self)

        def remove_slot_nodes() -> None:
            for node in nodes:
                node.remove()

        self._destroy_callbacks.append(remove_slot_nodes)
        return True

    @property
    def root_element(self) -> Optional[Element]:
        """First top-level element rendered by this component."""
        for node in self.nodes:
            if isinstance(node, Element):
                return node
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} props={self.props!r}>"
