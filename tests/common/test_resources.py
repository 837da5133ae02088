"""Unit tests for ImageScope / ImageLedger accounting."""

import numpy as np
import pytest

from qrlocate.common.resources import ImageScope


def _image():
    return np.zeros((4, 4), dtype=np.uint8)


class TestImageScope:
    def test_exit_releases_everything(self, ledger):
        with ImageScope(ledger) as scope:
            scope.adopt(_image())
            scope.adopt(_image())
            assert ledger.outstanding == 2

        assert ledger.created == 2
        assert ledger.released == 2
        assert scope.size == 0

    def test_exit_on_exception(self, ledger):
        with pytest.raises(RuntimeError):
            with ImageScope(ledger) as scope:
                scope.adopt(_image())
                raise RuntimeError("boom")

        assert ledger.outstanding == 0

    def test_adopt_same_image_twice_counts_once(self, ledger):
        image = _image()
        with ImageScope(ledger) as scope:
            scope.adopt(image)
            scope.adopt(image)

        assert ledger.created == 1
        assert ledger.released == 1

    def test_early_release(self, ledger):
        first, second = _image(), _image()
        with ImageScope(ledger) as scope:
            scope.adopt(first)
            scope.adopt(second)
            scope.release(first)

            assert not scope.owns(first)
            assert scope.owns(second)
            assert ledger.released == 1

        assert ledger.released == 2

    def test_release_foreign_image_ignored(self, ledger):
        with ImageScope(ledger) as scope:
            scope.release(_image())

        assert ledger.released == 0

    def test_close_is_idempotent(self, ledger):
        scope = ImageScope(ledger)
        scope.adopt(_image())
        scope.close()
        scope.close()

        assert ledger.released == 1

    def test_adopt_after_close(self, ledger):
        scope = ImageScope(ledger)
        scope.close()

        with pytest.raises(RuntimeError, match="closed scope"):
            scope.adopt(_image())

    def test_ledger_reset(self, ledger):
        with ImageScope(ledger) as scope:
            scope.adopt(_image())
        ledger.reset()

        assert (ledger.created, ledger.released) == (0, 0)
