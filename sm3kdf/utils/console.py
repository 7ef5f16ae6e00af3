from colorama import Fore, Style, init

from sm3kdf import config

init(autoreset=True)

_PREFIX = "[sm3kdf] "


def print_debug(msg):
    # Callers pass parameters only, never key material.
    if config.debug_enabled():
        print(Fore.MAGENTA + _PREFIX + str(msg) + Style.RESET_ALL)
