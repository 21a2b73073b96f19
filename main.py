from rich.pretty import pprint

from clioptions import *

__prog__ = "demo"

parser = (
    ArgumentParser(shell=True)
    .add("v", "verbose", Arity.COUNTING, helptext="repeat for more output")
    .add("o", "output", Arity.REQUIRED_VALUE, helptext="file to write")
    .add("c", "color", Arity.OPTIONAL_VALUE, helptext="auto, always or never")
    .add(None, "tag", Arity.MULTI_VALUE)
    .add("h", "help")
)


if __name__ == '__main__':
    result = parser.parse()
    if result["help"]:
        parser.help()
    else:
        pprint(result)
