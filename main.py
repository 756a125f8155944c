import math
import sys

from rich.pretty import pprint

from flagship import *

__prog__ = "basic"


class Flags(Schema):
    help = Flag("-h", "--help", type=bool, global_=True, descr="Display usage")
    version = Flag("-v", "--version", type=bool, descr="Display version")
    version_ex = Flag("--vv", type=bool, descr="Display version (extended)")

    class Echo(Command, descr="Print arguments"):
        settings = Settings(allow_unknown_arg=True)

    class Math(Command, descr="Math functions"):
        class Sqrt(Command, descr="Calculate square root"):
            number = Flag("-n", "--number", type=float, required=True, descr="Number")

        class Pow(Command, descr="Calculate base exponential"):
            base = Flag("-b", "--base", type=float, required=True, descr="Base")
            exponent = Flag("-e", "--exponent", type=float, required=True, descr="Exponent")


app = Application(Flags, "basic", "1.0.0", "A basic app", preset=Preset.AUTO)


@app.handler("Echo")
def echo(app, arguments):
    app.console.print(" ".join(arguments[1:]))


@app.handler("Math.Sqrt")
def sqrt(app, arguments):
    app.console.print(math.sqrt(app.flagset.schema.Math.Sqrt.number))


@app.handler("Math.Pow")
def power(app, arguments):
    flags = app.flagset.schema
    app.console.print(math.pow(flags.Math.Pow.base, flags.Math.Pow.exponent))


if __name__ == '__main__':
    if "--debug" in sys.argv:
        sys.argv.remove("--debug")
        install_logging()
    pprint(invoke(app))
