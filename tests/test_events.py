from extcheck.config import PartialEventPolicy
from extcheck.events import EventExtractor, collect_events

SOURCE = """<?php
/**
 * @event acme.demo.commented
 */
$vars = array('user_row');
extract($phpbb_dispatcher->trigger_event('acme.demo.user_loaded', compact($vars)));

$this->dispatcher->dispatch("acme.demo.page_header");
"""


def names(result):
    return [event.name for event in result.events]


def test_extracts_events_in_source_order():
    result = EventExtractor().extract(SOURCE, "event/listener.php")

    assert result.ok
    assert names(result) == ["acme.demo.user_loaded", "acme.demo.page_header"]
    first = result.events[0]
    assert first.file == "event/listener.php"
    assert first.line == 6
    assert first.declaration.startswith("extract($phpbb_dispatcher->trigger_event(")


def test_skips_comments_strings_heredoc_and_html():
    source = """<p>Don't call $phpbb_dispatcher->trigger_event('html.event') here</p>
<?php
// $phpbb_dispatcher->trigger_event('line.comment');
# $phpbb_dispatcher->trigger_event('hash.comment');
/* $phpbb_dispatcher->trigger_event('block.comment'); */
$text = 'quoted $phpbb_dispatcher->trigger_event("string.event")';
$doc = <<<EOT
  $phpbb_dispatcher->trigger_event('heredoc.event');
  EOT;
$phpbb_dispatcher->trigger_event('acme.demo.real');
?>
<div>It's plain HTML again</div>
"""
    result = EventExtractor().extract(source, "mixed.php")

    assert result.ok
    assert names(result) == ["acme.demo.real"]


def test_short_echo_tag_enters_php():
    source = "<div><?= $phpbb_dispatcher->dispatch('acme.demo.inline') ?></div>"

    result = EventExtractor().extract(source, "template.php")

    assert names(result) == ["acme.demo.inline"]


def test_unrelated_constructs_do_not_raise():
    source = "<?php\n$a = $b << 2;\n$dispatcher_count = 1;\n$other->trigger_event($name);\n"

    result = EventExtractor().extract(source, "unrelated.php")

    assert result.ok
    assert result.events == ()


def test_non_literal_event_name_is_an_error():
    source = "<?php\n$phpbb_dispatcher->trigger_event($name, compact($vars));\n"

    result = EventExtractor().extract(source, "dynamic.php")

    assert not result.ok
    assert result.error.line == 2
    assert result.error.path == "dynamic.php"
    assert "literal string" in str(result.error)


def test_interpolated_event_name_is_an_error():
    source = '<?php\n$phpbb_dispatcher->trigger_event("acme.{$name}");\n'

    result = EventExtractor().extract(source, "interpolated.php")

    assert not result.ok
    assert "variables" in result.error.message


def test_unterminated_comment_is_an_error():
    result = EventExtractor().extract("<?php\n/* never closed\n", "broken.php")

    assert not result.ok
    assert result.error.line == 2


def test_discard_policy_drops_partial_events():
    source = "<?php\n$phpbb_dispatcher->trigger_event('acme.demo.first');\n$s = 'open\n"

    result = EventExtractor(policy=PartialEventPolicy.DISCARD).extract(source, "partial.php")

    assert not result.ok
    assert result.events == ()


def test_keep_policy_retains_partial_events():
    source = "<?php\n$phpbb_dispatcher->trigger_event('acme.demo.first');\n$s = 'open\n"

    result = EventExtractor(policy=PartialEventPolicy.KEEP).extract(source, "partial.php")

    assert not result.ok
    assert names(result) == ["acme.demo.first"]


def test_crawl_continues_after_failing_file(tmp_path):
    (tmp_path / "a.php").write_text("<?php\n$phpbb_dispatcher->trigger_event($bad);\n", encoding="utf-8")
    (tmp_path / "b.php").write_text("<?php\n$phpbb_dispatcher->trigger_event('acme.demo.b');\n", encoding="utf-8")

    results = EventExtractor().crawl(["a.php", "missing.php", "b.php"], tmp_path)

    assert [result.ok for result in results] == [False, False, True]
    assert "Unable to read" in str(results[1].error)
    assert [event.name for event in collect_events(results)] == ["acme.demo.b"]


def test_event_prefix_match_is_case_insensitive():
    result = EventExtractor().extract("<?php\n$phpbb_dispatcher->dispatch('Acme.Demo.Created');\n", "x.php")

    event = result.events[0]
    assert event.name == "Acme.Demo.Created"
    assert event.matches_prefix("acme.demo")


def test_generic_dispatcher_with_event_object_is_skipped():
    source = (
        "<?php\n"
        "$this->dispatcher->dispatch($event, KernelEvents::REQUEST);\n"
        "$dispatcher->dispatch(KernelEvents::REQUEST, $event);\n"
        '$dispatcher->dispatch("prefix.{$suffix}");\n'
        "$this->dispatcher->dispatch('acme.demo.literal');\n"
    )

    result = EventExtractor().extract(source, "a.php")

    assert result.ok
    assert names(result) == ["acme.demo.literal"]


def test_phpbb_dispatcher_on_this_still_requires_literal():
    source = "<?php\n$this->phpbb_dispatcher->trigger_event(self::EVENT);\n"

    result = EventExtractor().extract(source, "a.php")

    assert not result.ok
    assert "literal string" in result.error.message
