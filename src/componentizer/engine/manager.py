# Copyright 2026 Componentizer Contributors
# SPDX-License-Identifier: Apache-2.0

"""Resolution of a component tree into a merged model and a fetched component set.

:meth:`ComponentManager.init` runs in two phases:

1. **Discovery** walks the tree from the main component. Each component is
   fetched and its descriptor parsed; its parent is discovered first, then
   its declared components (in declaration order), then the component
   itself is appended. A declared component is only discovered when the
   model visible at that point references it; parents are always
   discovered. The model fragments are merged along the way so that
   descendants override ancestors, giving a provisional model and an
   ordered candidate list.

2. **Final merge** walks the candidates in order, skipping the ones the
   provisional model does not reference. Each remaining candidate is
   re-resolved against the final model built so far, fetched (usually a
   cache hit), and its fragment merged. The walk order is the final
   component order.

Fetched components are cached by identity for the lifetime of the manager.
They can then be used, possibly through a templated copy, and searched for
files or directories.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from componentizer.engine.matching_path import MatchingPath, MatchingPaths
from componentizer.engine.template import execute_template
from componentizer.engine.usable import UsableComponent
from componentizer.model.interfaces import Component, ComponentRef, Model, TemplateContext, as_env_vars_aware
from componentizer.scm import git_ops
from componentizer.scm.handlers import FetchedComponent, ScmError, fetch_through_scm, get_scm_handler

if TYPE_CHECKING:
    from componentizer.workspace.config import WorkspaceConfig

# ###############
# Public Interface
# ###############


class ResolutionError(Exception):
    """Raised when the component tree cannot be resolved.

    Covers descriptor parse errors, model merge errors, circular parent
    chains, and references whose identity changes on resolution.
    """


class ComponentNotAvailableError(Exception):
    """Raised when a component is used before being fetched."""

    def __init__(self, component_id: str) -> None:
        self.component_id = component_id
        super().__init__(f"Component '{component_id}' is not available")


class ComponentManager:
    """Facade resolving, fetching, templating and searching components.

    A manager exclusively owns its work directory. It is not thread-safe:
    :meth:`init` mutates the fetched component cache without locking.
    """

    def __init__(
        self,
        work_dir: Path,
        logger: logging.Logger | None = None,
        *,
        git_timeout: int = git_ops.DEFAULT_TIMEOUT,
    ) -> None:
        self.work_dir = work_dir
        self.logger = logger if logger is not None else logging.getLogger("componentizer")
        self._git_timeout = git_timeout
        self._fetched: dict[str, FetchedComponent] = {}
        self._order: list[str] = []

    @classmethod
    def from_config(
        cls,
        config: WorkspaceConfig,
        base_dir: Path,
        logger: logging.Logger | None = None,
    ) -> ComponentManager:
        """Create a manager from a workspace configuration.

        Args:
            config: The loaded configuration.
            base_dir: Directory against which a relative work directory is resolved.
            logger: Logger to use; its level is set to the configured one.
        """
        logger = logger if logger is not None else logging.getLogger("componentizer")
        logger.setLevel(config.log_level)
        return cls(config.resolve_work_directory(base_dir), logger, git_timeout=config.git_timeout)

    def init(self, main: Component, context: TemplateContext) -> Model | None:
        """Resolve the tree of *main* and return the final merged model.

        Raises:
            ScmError: If a component cannot be fetched.
            ResolutionError: If a descriptor cannot be parsed or models cannot be merged.
        """
        provisional, candidates = self._find_components(main, context, set(), set())

        final: Model | None = None
        order: list[str] = []
        for candidate in candidates:
            if provisional is not None and not provisional.is_referenced(candidate):
                self.logger.debug("Component %s is not referenced, skipping it", candidate.component_id())
                continue
            resolved = self._resolve(candidate, final)
            fetched = self._fetch_component(resolved)
            fetched.component = resolved
            _, _, fragment = self._parse_descriptor(fetched, context, with_components=False)
            final = self._merge(final, fragment, resolved.component_id())
            order.append(resolved.component_id())

        for fetched in self._fetched.values():
            fetched.component = self._resolve(fetched.component, final)

        self._order = order
        self.logger.info("Resolved components: %s", ", ".join(order))
        return final

    def component_order(self) -> list[str]:
        """Return the identities of the components used by the last :meth:`init`, in merge order."""
        return list(self._order)

    def is_available(self, ref: ComponentRef) -> bool:
        """Return True if the referenced component has been fetched."""
        return ref.component_id() in self._fetched

    def fetched_component(self, ref: ComponentRef) -> FetchedComponent | None:
        """Return the cache entry of the referenced component, if fetched."""
        return self._fetched.get(ref.component_id())

    def use(self, ref: ComponentRef, context: TemplateContext) -> UsableComponent:
        """Return a usable view of the referenced component.

        If the component declares template patterns matching some of its
        files, the view points to a templated copy which is deleted when the
        view is released. Always release the returned component once done.

        Raises:
            ComponentNotAvailableError: If the component has not been fetched.
            TemplateError: If templating fails.
        """
        component_id = ref.component_id()
        fetched = self._fetched.get(component_id)
        if fetched is None:
            raise ComponentNotAvailableError(component_id)

        capable = as_env_vars_aware(ref)
        env_vars = capable.env_vars() if capable is not None else {}

        patterns = fetched.component.templates()
        if patterns:
            templated = execute_template(fetched.root_path, patterns, context.clone(ref))
            if templated is not None:
                self.logger.debug("Component %s templated into %s", component_id, templated)
                return UsableComponent(
                    component_id,
                    templated,
                    templated=True,
                    release=self._cleanup(templated),
                    source=ref,
                    env_vars=env_vars,
                )
        return UsableComponent(component_id, fetched.root_path, source=ref, env_vars=env_vars)

    def contains_file(self, name: str, context: TemplateContext, *refs: ComponentRef) -> MatchingPaths:
        """Return the components containing the file *name*.

        Only *refs* are searched when given, every fetched component otherwise.
        The returned paths hold their usable components open; release them
        once done.
        """
        return self._contains(name, context, refs, directory=False)

    def contains_directory(self, name: str, context: TemplateContext, *refs: ComponentRef) -> MatchingPaths:
        """Return the components containing the directory *name*.

        Only *refs* are searched when given, every fetched component otherwise.
        The returned paths hold their usable components open; release them
        once done.
        """
        return self._contains(name, context, refs, directory=True)

    # ################
    # Implementation
    # ################

    def _find_components(
        self,
        component: Component,
        context: TemplateContext,
        visiting: set[str],
        discovered: set[str],
    ) -> tuple[Model | None, list[Component]]:
        """Discover *component* and its tree.

        Args:
            visiting: Identities being discovered (cycle guard).
            discovered: Identities already discovered; their contribution is
                already in the accumulator of a caller.

        Returns:
            The model of the subtree and its components in merge order.
        """
        component_id = component.component_id()
        if component_id in discovered:
            return None, []
        if component_id in visiting:
            raise ResolutionError(f"Circular dependency detected involving '{component_id}'")

        visiting.add(component_id)
        try:
            fetched = self._fetch_component(component)
            parent, references, own = self._parse_descriptor(fetched, context, component=component)

            model: Model | None = None
            order: list[Component] = []
            if parent is not None:
                model, order = self._find_components(parent, context, visiting, discovered)

            for reference in references:
                reference_id = reference.component_id()
                if reference_id in visiting:
                    self.logger.debug("Component %s is already being resolved", reference_id)
                    continue
                view = self._merge(model, own, component_id)
                if view is not None and not view.is_referenced(reference):
                    self.logger.debug("Component %s declared by %s is not referenced", reference_id, component_id)
                    continue
                ref_model, ref_order = self._find_components(reference, context, visiting, discovered)
                model = self._merge(model, ref_model, reference_id)
                order.extend(ref_order)

            order.append(component)
            discovered.add(component_id)
            return self._merge(model, own, component_id), order
        finally:
            visiting.discard(component_id)

    def _fetch_component(self, component: Component) -> FetchedComponent:
        """Fetch *component* unless a component with the same identity already was."""
        component_id = component.component_id()
        fetched = self._fetched.get(component_id)
        if fetched is not None:
            self.logger.debug("Component %s already fetched", component_id)
            return fetched

        repository = git_ops.strip_credentials(str(component.repository()))
        self.logger.info("Fetching component %s from %s", component_id, repository)
        handler = get_scm_handler(component, self.logger, git_timeout=self._git_timeout)
        try:
            fetched = fetch_through_scm(component, handler, self.work_dir)
        except ScmError as exc:
            self.logger.error("Error fetching component %s: %s", component_id, exc)
            raise
        self._fetched[component_id] = fetched
        self.logger.info("Component %s is available in %s", component_id, fetched.root_path)
        return fetched

    def _parse_descriptor(
        self,
        fetched: FetchedComponent,
        context: TemplateContext,
        *,
        component: Component | None = None,
        with_components: bool = True,
    ) -> tuple[Component | None, list[Component], Model | None]:
        """Parse the parent, the declared components and the model of a fetched component."""
        component = component if component is not None else fetched.component
        descriptor = _descriptor_path(fetched.root_path, component)
        if descriptor is None:
            self.logger.debug("No descriptor in component %s", component.component_id())
            return None, [], None

        parent: Component | None = None
        references: list[Component] = []
        try:
            if with_components:
                parent, references = component.parse_components(descriptor, context)
            model = component.parse_model(descriptor, context)
        except (ScmError, ResolutionError):
            raise
        except Exception as exc:
            raise ResolutionError(f"Cannot parse descriptor of component '{component.component_id()}': {exc}") from exc
        return parent, list(references), model

    def _merge(self, model: Model | None, other: Model | None, component_id: str) -> Model | None:
        """Merge *other* over *model*, either of which may be missing."""
        if other is None:
            return model
        if model is None:
            return other
        try:
            return model.merge(other)
        except Exception as exc:
            raise ResolutionError(f"Cannot merge the model of component '{component_id}': {exc}") from exc

    def _resolve(self, ref: ComponentRef, model: Model | None) -> Component:
        """Resolve *ref* against *model*, checking that its identity is kept."""
        component_id = ref.component_id()
        try:
            component = ref.component(model)
        except Exception as exc:
            raise ResolutionError(f"Cannot resolve component '{component_id}': {exc}") from exc
        if component.component_id() != component_id:
            raise ResolutionError(
                f"Component '{component_id}' resolved to a different component '{component.component_id()}'"
            )
        return component

    def _contains(
        self,
        name: str,
        context: TemplateContext,
        refs: tuple[ComponentRef, ...],
        *,
        directory: bool,
    ) -> MatchingPaths:
        candidates: list[ComponentRef] = list(refs) if refs else [f.component for f in self._fetched.values()]
        result = MatchingPaths()
        for ref in candidates:
            match = self._check_match(ref, context, name, directory=directory)
            if match is not None:
                result.paths.append(match)
        return result

    def _check_match(
        self,
        ref: ComponentRef,
        context: TemplateContext,
        name: str,
        *,
        directory: bool,
    ) -> MatchingPath | None:
        try:
            usable = self.use(ref, context)
        except Exception as exc:
            self.logger.warning("An error occurred using the component %s: %s", ref.component_id(), exc)
            return None
        match = usable.contains_directory(name) if directory else usable.contains_file(name)
        if match is None:
            usable.release()
        return match

    def _cleanup(self, path: Path) -> Callable[[], None]:
        """Return the disposal action of a templated copy."""

        def release() -> None:
            try:
                shutil.rmtree(path)
            except OSError as exc:
                self.logger.warning("Unable to clean temporary component path %s: %s", path, exc)

        return release


def _descriptor_path(root: Path, component: Component) -> Path | None:
    """Return the descriptor path of *component* under *root* if it exists."""
    descriptor = component.descriptor()
    if not descriptor:
        return None
    path = root / descriptor
    return path if path.exists() else None
