"""Tests for :mod:`gitusers.action`."""

from unittest import TestCase, mock

from .. import action
from ..action import Action, Pipeline


class TestPipelineExecute(TestCase):
    """:meth:`.Pipeline.execute` runs forward steps in order."""

    def test_runs_all_forward_steps(self):
        """Each forward step gets the previous step's result."""
        calls = []

        def first(ctx):
            calls.append(('first', ctx.params, ctx.previous))
            return 'one'

        def second(ctx):
            calls.append(('second', ctx.params, ctx.previous))
            return 'two'

        pipeline = Pipeline(Action('first', first), Action('second', second))
        result = pipeline.execute('foo', 'bar')
        self.assertEqual(result, 'two', 'Returns the last forward result')
        self.assertEqual(calls, [
            ('first', ('foo', 'bar'), None),
            ('second', ('foo', 'bar'), 'one'),
        ])

    def test_no_actions(self):
        """An empty pipeline cannot be executed."""
        with self.assertRaises(ValueError):
            Pipeline().execute('foo')

    def test_not_enough_params(self):
        """Nothing runs if an action needs more params than are given."""
        forward = mock.MagicMock()
        pipeline = Pipeline(Action('first', forward),
                            Action('second', forward, min_params=2))
        with self.assertRaises(ValueError):
            pipeline.execute('foo')
        self.assertEqual(forward.call_count, 0)

    def test_can_be_executed_again(self):
        """A pipeline holds no state between executions."""
        pipeline = Pipeline(Action('double', lambda ctx: ctx.params[0] * 2))
        self.assertEqual(pipeline.execute(2), 4)
        self.assertEqual(pipeline.execute(5), 10)


class TestPipelineRollback(TestCase):
    """When a forward step fails, completed steps are undone."""

    def test_rolls_back_in_reverse_order(self):
        """Backward steps run last-to-first, with their own results."""
        calls = []

        def forward(name):
            def inner(ctx):
                calls.append(f'forward {name}')
                return name
            return inner

        def backward(ctx):
            calls.append(f'backward {ctx.fw_result}')

        def fail(ctx):
            calls.append('forward c')
            raise RuntimeError('nope')

        never = mock.MagicMock()
        pipeline = Pipeline(
            Action('a', forward('a'), backward),
            Action('b', forward('b'), backward),
            Action('c', fail, backward),
            Action('d', never, backward),
        )
        with self.assertRaises(RuntimeError):
            pipeline.execute()
        self.assertEqual(calls, ['forward a', 'forward b', 'forward c',
                                 'backward b', 'backward a'])
        self.assertEqual(never.call_count, 0, 'Later steps are not run')

    def test_first_step_fails(self):
        """If the first step fails there is nothing to roll back."""
        backward = mock.MagicMock()
        error = RuntimeError('nope')
        pipeline = Pipeline(
            Action('a', mock.MagicMock(side_effect=error), backward),
            Action('b', mock.MagicMock(), backward),
        )
        with self.assertRaises(RuntimeError) as caught:
            pipeline.execute('foo')
        self.assertIs(caught.exception, error)
        self.assertEqual(backward.call_count, 0)

    def test_backward_receives_params(self):
        """Backward steps see the pipeline params."""
        backward = mock.MagicMock()
        pipeline = Pipeline(
            Action('a', mock.MagicMock(return_value='res'), backward),
            Action('b', mock.MagicMock(side_effect=ValueError)),
        )
        with self.assertRaises(ValueError):
            pipeline.execute('foo', 'bar')
        ctx = backward.call_args[0][0]
        self.assertEqual(ctx.params, ('foo', 'bar'))
        self.assertEqual(ctx.fw_result, 'res')

    def test_actions_without_backward_are_skipped(self):
        """An action with no backward step is passed over on rollback."""
        backward = mock.MagicMock()
        pipeline = Pipeline(
            Action('a', mock.MagicMock(), backward),
            Action('b', mock.MagicMock()),
            Action('c', mock.MagicMock(side_effect=ValueError)),
        )
        with self.assertRaises(ValueError):
            pipeline.execute()
        self.assertEqual(backward.call_count, 1)

    @mock.patch(f'{action.__name__}.logger')
    def test_failed_backward_does_not_stop_rollback(self, mock_logger):
        """Every backward step runs, and the forward error is raised."""
        first_backward = mock.MagicMock()
        error = KeyError('forward')
        pipeline = Pipeline(
            Action('a', mock.MagicMock(), first_backward),
            Action('b', mock.MagicMock(),
                   mock.MagicMock(side_effect=IOError('backward'))),
            Action('c', mock.MagicMock(side_effect=error)),
        )
        with self.assertRaises(KeyError) as caught:
            pipeline.execute()
        self.assertIs(caught.exception, error,
                      'The original forward error is raised')
        self.assertEqual(first_backward.call_count, 1)
        self.assertEqual(mock_logger.error.call_count, 1,
                         'The rollback failure is logged')
