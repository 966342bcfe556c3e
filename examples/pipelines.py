"""Example: reports for a few method-chain pipelines.

Run with ``python -m examine examples/pipelines.py``.
"""

import time

import examine


class Stream:
    """Tiny fluent wrapper so every step sits on its own line."""

    def __init__(self, items):
        self.items = list(items)

    def map(self, func):
        return Stream(func(item) for item in self.items)

    def then(self, func):
        return func(self)

    def to_dict(self):
        return dict(self.items)

    def __repr__(self):
        return f"Stream({self.items!r})"


def nap(stream):
    time.sleep(0.2)
    return stream


def show_vars() -> dict:
    numbers = [1, 2, 3]

    return (
        Stream(numbers)
        .map(lambda n: (n, str(n * n)))
        .to_dict()
        .pipe(examine.inspect, show_vars=True)
    )


def inspect_pipeline() -> dict:
    numbers = [1, 2, 3]

    return (
        Stream(numbers)
        .map(lambda n: (n, str(n * n)))
        .to_dict()
        .pipe(examine.inspect, inspect_pipeline=True)
    )


def pipeline_with_sleep() -> dict:
    numbers = [1, 2, 3]

    return (
        Stream(numbers)
        .map(lambda n: (n, str(n * n)))
        .then(nap)
        .then(nap)
        .to_dict()
        .pipe(examine.inspect, inspect_pipeline=True, time_unit="second")
    )


def inline() -> str:
    return "cat".upper().pipe(examine.inspect)


def main() -> None:
    show_vars()
    inspect_pipeline()
    pipeline_with_sleep()
    inline()


if __name__ == "__main__":
    main()
