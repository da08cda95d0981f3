from rich.console import Console

# stdout belongs to Alfred; diagnostics go to its debugger via stderr.
console = Console(stderr=True, highlight=False)


_verbose = False


def SetVerbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def VerbosePrint(*args, **kwargs):
    """
    Prints output to the console if verbose mode is enabled.
    Parameters
    ----------
    *args
        Variable length argument list to print.
    **kwargs
        Arbitrary keyword arguments for console.print.
    """

    if _verbose:
        console.print(*args, **kwargs)
