from utils.pdf import NumberedCanvas, build_setlist_pdf, pdf_filename, format_song_line

def test_pdf_filename():
    assert pdf_filename("Friday Night @ The Club") == "friday_night___the_club_setlist.pdf"
    assert pdf_filename("Gig") == "gig_setlist.pdf"

def test_format_song_line():
    assert format_song_line({"title": "Song", "original_artist": "Band"}) == "Song by Band"
    assert format_song_line({"title": "Song", "original_artist": "Band", "key_signature": "Am"}) == "Song by Band [Am]"

def test_build_pdf_new_page_per_set(mocker):
    footer = mocker.spy(NumberedCanvas, "_draw_footer")
    setlist = {
        "name": "Tour",
        "sets": [
            {"name": "Set 1", "songs": [{"title": "A", "original_artist": "X"}]},
            {"name": "Set 2", "songs": [{"title": "B", "original_artist": "Y", "key_signature": "E"}]},
        ],
    }
    content = build_setlist_pdf(setlist)
    assert content.startswith(b"%PDF")
    # ページごとにフッター (Page N of M) が描かれる
    assert footer.call_count == 2
    assert all(c.args[1] == 2 for c in footer.call_args_list)

def test_build_pdf_overflowing_set(mocker):
    footer = mocker.spy(NumberedCanvas, "_draw_footer")
    songs = [{"title": f"Song {i}", "original_artist": "Band"} for i in range(80)]
    content = build_setlist_pdf({"name": "Marathon", "sets": [{"name": "Long Set", "songs": songs}]})
    assert content.startswith(b"%PDF")
    # 1セットでも複数ページに分かれる
    assert footer.call_count > 1

def test_build_pdf_repeats_set_heading_on_overflow(mocker):
    draw = mocker.spy(NumberedCanvas, "drawString")
    songs = [{"title": f"Song {i}", "original_artist": "Band"} for i in range(80)]
    build_setlist_pdf({"name": "Marathon", "sets": [{"name": "Long Set", "songs": songs}]})
    headings = [c for c in draw.call_args_list if c.args[3] == "Long Set"]
    assert len(headings) > 1

def test_build_pdf_empty_setlist(mocker):
    footer = mocker.spy(NumberedCanvas, "_draw_footer")
    content = build_setlist_pdf({"name": "Nothing Yet", "sets": []})
    assert content.startswith(b"%PDF")
    assert footer.call_count == 1
