"""
Pipelines of reversible actions.

An :class:`.Action` pairs a forward step with an optional backward step that
undoes it. A :class:`.Pipeline` runs the forward steps in order; if one of
them raises, the backward steps of the actions that already completed are run
in reverse order and the original exception is re-raised.

Rollback is best effort. A backward step that raises is logged and the
remaining backward steps still run, but the two systems may then disagree.
The caller only ever sees the forward exception.

.. code-block:: python

   pipeline = Pipeline(register_key, persist_key)
   user = pipeline.execute(key, user)

"""

from typing import Any, Callable, List, NamedTuple, Optional, Tuple

from . import logging

logger = logging.getLogger(__name__)


class ForwardContext(NamedTuple):
    """What a forward step gets to work with."""

    params: Tuple[Any, ...]
    """Parameters passed to :meth:`.Pipeline.execute`."""

    previous: Any = None
    """Result of the previous action's forward step, if any."""


class BackwardContext(NamedTuple):
    """What a backward step gets to work with."""

    params: Tuple[Any, ...]
    """Parameters passed to :meth:`.Pipeline.execute`."""

    fw_result: Any = None
    """Result of this action's own forward step."""


class Action(NamedTuple):
    """A single reversible unit of work."""

    name: str

    forward: Callable[[ForwardContext], Any]
    """Does the work. Whatever it returns is passed along the pipeline."""

    backward: Optional[Callable[[BackwardContext], None]] = None
    """Undoes the work. Not needed for the last action in a pipeline."""

    min_params: int = 0
    """Number of pipeline parameters that the action requires."""


class Pipeline(object):
    """
    Executes an ordered sequence of :class:`.Action`s.

    A pipeline holds no state between calls to :meth:`.execute`, so the same
    instance may be executed any number of times.
    """

    def __init__(self, *actions: Action) -> None:
        self.actions = list(actions)

    def execute(self, *params: Any) -> Any:
        """
        Run every action, rolling back completed ones on failure.

        Parameters
        ----------
        params
            Shared by every action, via :attr:`ForwardContext.params` and
            :attr:`BackwardContext.params`.

        Returns
        -------
        object
            The result of the last action's forward step.

        Raises
        ------
        ValueError
            If the pipeline is empty, or an action needs more parameters than
            were provided. Nothing is executed in that case.
        Exception
            Whatever the failing forward step raised.

        """
        if not self.actions:
            raise ValueError('No actions to execute')
        for action in self.actions:
            if len(params) < action.min_params:
                raise ValueError(
                    f'Not enough parameters for {action.name}: expected'
                    f' {action.min_params}, got {len(params)}'
                )

        completed: List[Tuple[Action, Any]] = []
        previous = None
        for action in self.actions:
            logger.debug('Executing %s', action.name)
            try:
                previous = action.forward(ForwardContext(params, previous))
            except Exception as e:
                logger.debug('%s failed, rolling back %i action(s): %s',
                             action.name, len(completed), e)
                self._rollback(completed, params, e)
                raise
            completed.append((action, previous))
        return previous

    def _rollback(self, completed: List[Tuple[Action, Any]],
                  params: Tuple[Any, ...], cause: Exception) -> None:
        for action, fw_result in reversed(completed):
            if action.backward is None:
                continue
            logger.debug('Rolling back %s', action.name)
            try:
                action.backward(BackwardContext(params, fw_result))
            except Exception as e:
                logger.error('Failed to roll back %s after "%s": %s',
                             action.name, cause, e)
