from rich.pretty import pprint

from arbor import *

__prog__ = "fcast"

play = (
    CommandBuilder("play", "play media on the receiver")
    .option("mime_type", "m", "mime type of the content", required=True)
    .group(
        OptionGroupBuilder("source", "where the media comes from", Constraint.EXACTLY_ONE)
        .option("file", "f", "local file to stream")
        .option("url", "u", "remote url to play")
        .option("content", "c", "inline content to play")
    )
    .option("timestamp", "t", "position to start from, in seconds", default="0")
    .option("speed", "s", "playback speed factor", default="1")
    .build()
)

fcast = (
    CommandBuilder("fcast", "control a media receiver from the command line")
    .option("connection_type", "c", "transport used to reach the receiver", default="tcp")
    .option("host", "h", "address of the receiver", required=True)
    .option("port", "p", "port of the receiver")
    .subcommand(play)
    .subcommand(
        CommandBuilder("seek", "jump to a position")
        .option("timestamp", "t", "position in seconds", required=True)
    )
    .subcommand(CommandBuilder("pause", "pause playback"))
    .subcommand(CommandBuilder("resume", "resume playback"))
    .subcommand(CommandBuilder("stop", "stop playback"))
    .subcommand(CommandBuilder("listen", "print events sent by the receiver"))
    .subcommand(
        CommandBuilder("setvolume", "change the volume")
        .option("volume", "v", "volume between 0 and 1", required=True)
    )
    .subcommand(
        CommandBuilder("setspeed", "change the playback speed")
        .option("speed", "s", "playback speed factor", required=True)
    )
    .build()
)


if __name__ == '__main__':
    matches = invoke(fcast)
    pprint(matches)
    print(matches)
    if seek := matches.subcommand_matches("seek"):
        pprint(seek.as_double("timestamp"))
