from rich.pretty import pprint

from kvargs import *

__prog__ = "notes"

parser = new_parser(description="Keep short notes.", shell=True, colorful=True)
parser = add_argument(parser, "short", "v", "long", "verbose", "action", "count", "help", "be chatty")
parser = add_argument(parser, "long", "version", "action", "version", "version", "%(prog)s 0.1.0")
parser = add_argument(parser, "name", "command", "action", "sub_command", "help", "what to do")

add = new_parser(description="add a note")
add = add_argument(add, "name", "text", "nargs", "+", "help", "note text")
add = add_argument(add, "short", "t", "long", "tag", "action", "append", "help", "attach a tag")
parser = add_subparser(parser, "command", "add", add, "a")

remove = new_parser(description="remove notes by index")
remove = add_argument(remove, "name", "index", "nargs", "*")
parser = add_subparser(parser, "command", "remove", remove, "rm")


if __name__ == '__main__':
    if (result := parse_arguments(parser)) is not None:
        prettyprint(result)
        pprint(todict(result))
