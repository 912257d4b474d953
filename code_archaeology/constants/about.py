"""Static metadata describing Code Archaeology."""

APP_NAME = "Code Archaeology"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "Code Archaeology is a small excavation game about programming-language history. "
    "Dig up code fragments from the FORTRAN, C and Python eras and prove what you learned in a quiz."
)

HELP_TEXT = (
    "Click a cell of the dig site to excavate it. Your first dig is always safe.\n\n"
    "Six cells hide code fragments and six hide unstable ground. Hitting unstable ground "
    "collapses the site: the board is rebuilt and the fragments found on it are lost, "
    "but your score is kept.\n\n"
    "Find all six fragments to start the era quiz. Answer at least 3 of 5 questions "
    "correctly to unlock the next era. Every correct answer is worth 10 points.\n\n"
    "Unlocked eras can be revisited at any time. Fragments you have discovered are "
    "kept in the museum."
)

PROGRESS_START_TEXT = "Start digging to find code fragments!"
PROGRESS_PARTIAL_TEMPLATE = "Found {found} of {total} fragments"
PROGRESS_COMPLETE_TEXT = "All fragments found! Era complete!"
