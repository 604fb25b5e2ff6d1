from rich.pretty import pprint

from helmsman import *

program = (
    Program("notes", "0.3", "keep short notes in a folder", authors=["Jane Roe"])
    .add(Flag("-v", "--verbose", repeating=True, description="print more details"))
    .add(Option("-d", "--directory", tag="path", default=".", description="notes folder").accepts_directories())
    .add(
        Command("add", "write a new note")
        .add(Option("-t", "--tag", repeating=True, description="label the note"))
        .add(Argument("title", "note title"))
        .add(Argument("words", "note body").repeating().optional())
    )
    .topic_group("browsing")
    .add(
        Command("list", "list notes")
        .add(Option("--sort", default="date").accepts(["date", "title"]))
    )
    .default_command("list")
)


if __name__ == '__main__':
    pprint(program.run())
