from timed_lyrics.cli import main

main()
