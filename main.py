from rich.pretty import pprint

from clapper import *

__prog__ = "calc"

calculator = Command(
    "calc",
    arguments=[
        Argument("number", positional=True),
        Argument("add", long="add", short="a", nargs=1),
        Argument("multiply", long="multiply", short="m", nargs=1),
        Argument("divide", long="divide", short="d", nargs=1),
    ],
    subcommands=[
        Subcommand("show", long="show", short="s", arguments=[
            Argument("verbose", long="verbose", short="v"),
        ]),
    ],
)


if __name__ == '__main__':
    pprint(resolve(calculator, shell=True, fancy=True, colorful=True).values)
