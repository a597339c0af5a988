import sys

from rich.pretty import pprint

from argscope import *

registry = Registry(shell=True, fancy=True, colorful=True)
registry.init("demo", "1.0.0", "MIT", "showcase program", unnamed=True)
registry.add_subcommand(1, "build", "compile sources")

verbose = registry.add_param_flag(0, "v", "increase verbosity")
color = registry.add_param_bool(0, "color", "colour output", default=True)
jobs = registry.add_param_int(1, "jobs", "worker count", default=4)
mode = registry.add_param_string(1, "mode", "build mode", default="debug", restrict=True)
registry.add_restricted_value(1, "mode", "debug")
registry.add_restricted_value(1, "mode", "release")
source = registry.add_arg_string(1, "input", "source file")


if __name__ == '__main__':
    consumed, scope = registry.parse(sys.argv)
    pprint({
        "scope": scope,
        "verbose": verbose.value,
        "color": color.value,
        "jobs": jobs.value,
        "mode": mode.value,
        "input": source.value,
        "unnamed": sys.argv[consumed:],
    })
