from dataclasses import dataclass

from helmsman import *

builder = Builder("harbor", version="0.1.0", descr="manage local containers")


@dataclass
class RunArgs:
    image: str
    command: list[str]


@dataclass
class RunOptions:
    name: str | None = Option(None, short="n", descr="container name")
    env: list[str] = Option((), short="e", descr="environment entries (KEY=VALUE)", metavar="ENTRY")
    detach: bool = Option(False, short="d", descr="run in the background")


@builder.command("container run", args=RunArgs, options=RunOptions, descr="run a container")
def run(args, options, context):
    context.out.print("running %s as %s" % (args.image, options.name or "<anonymous>"))


@builder.command("container ls", descr="list containers")
def ls(args, options, context):
    context.out.print("no containers")


builder.plugin(HelpPlugin(), VersionPlugin(), SuggestPlugin())

registry = builder.build()


if __name__ == '__main__':
    registry.run()
