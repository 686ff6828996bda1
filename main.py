import argparse
import sys

from rich.pretty import pprint

from tiller import *

__prog__ = "tiller-demo"


provider = ParameterProvider(shell=True, deferred=True)
provider.define_flag_parameter("--verbose", short_name="-v", environment_variable="TILLER_VERBOSE")
provider.define_integer_parameter("--count", environment_variable="TILLER_COUNT", default=1)
provider.define_choice_parameter("--mode", ("fast", "safe"), environment_variable="TILLER_MODE", default="safe")
provider.define_string_list_parameter("--tag", environment_variable="TILLER_TAGS", delimiter=",")


def _parse(argv):
    parser = argparse.ArgumentParser(prog=__prog__)
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--count", type=int)
    parser.add_argument("--mode")
    parser.add_argument("--tag", action="append")
    namespace = parser.parse_args(argv)
    return {"--" + key: value for key, value in vars(namespace).items()}


if __name__ == '__main__':
    provider.process(_parse(sys.argv[1:]))
    pprint(provider)
    print(provider.append_to_arg_list([__prog__]))
