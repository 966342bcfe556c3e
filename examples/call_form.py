"""Example: the call form, labels and pretty printing."""

import examine


def main() -> None:
    x = 7
    y = 5
    examine.inspect(x + y, label="sum", show_vars=True)

    inventory = {name: list(range(count)) for name, count in (("apples", 12), ("pears", 9), ("plums", 14))}
    examine.inspect(inventory, pretty=True, measure=False, color="black", bg_color="yellow")


if __name__ == "__main__":
    main()
