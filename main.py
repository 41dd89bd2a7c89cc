from rich.pretty import pprint

from pennant import *

__prog__ = "greeter"

flags = FlagSet(__prog__, ErrorHandling.EXIT, colorful=True)
name = flags.str("name", "world", "who to greet", shortcut="n")
times = flags.int("times", 1, "how many greetings", shortcut="t")
loud = flags.bool("loud", False, "shout the greeting", shortcut="l")
pause = flags.duration("pause", usage="delay between greetings")


if __name__ == '__main__':
    flags.parse(__import__("sys").argv[1:])
    pprint(flags.lookup("name"))
    flags.visit(pprint)
    pprint(flags.args)
