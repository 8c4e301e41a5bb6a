"""
Tests for the idiom strategies: sequence queries, framework calls, strings,
collections and tasks. None of these use a semantic model, so every match
comes from the receiver's spelling.
"""

from sharpjs.converter import Converter
from sharpjs.parser import parse_expression


def js(source: str) -> str:
	return Converter().convert_expression(parse_expression(source))


# =============================================================================
# Sequence queries
# =============================================================================


class TestLinq:
	"""System.Linq operators on an untyped receiver."""

	def test_where_select_to_list(self):
		code = js("items.Where(x => x > 1).Select(x => x * 2).ToList()")
		assert code == "items.filter((x) => x > 1).map((x) => x * 2)"

	def test_any_without_predicate(self):
		assert js("items.Any()") == "items.length > 0"

	def test_all(self):
		assert js("items.All(x => x.Done)") == "items.every((x) => x.done)"

	def test_contains(self):
		assert js("ids.Contains(id)") == "ids.includes(id)"

	def test_first(self):
		assert js("items.First()") == "items[0]"

	def test_first_or_default_with_predicate(self):
		code = js("items.FirstOrDefault(x => x.Id == id)")
		assert code == "items.find((x) => x.id === id) ?? null"

	def test_last(self):
		assert js("items.Last()") == "items.at(-1)"

	def test_count_with_predicate(self):
		assert js("items.Count(x => x.Done)") == "items.filter((x) => x.done).length"

	def test_sum(self):
		assert js("items.Sum()") == "items.reduce(($a, $b) => $a + $b, 0)"

	def test_sum_with_selector_is_inlined(self):
		assert js("items.Sum(x => x.Price)") == "items.reduce(($a, $b) => $a + $b.price, 0)"

	def test_max_with_selector(self):
		assert js("items.Max(x => x.Score)") == "Math.max(...items.map((x) => x.score))"

	def test_skip_take(self):
		assert js("items.Skip(2).Take(3)") == "items.slice(2).slice(0, 3)"

	def test_distinct(self):
		assert js("items.Distinct()") == "[...new Set(items)]"

	def test_union(self):
		assert js("a.Union(b)") == "[...new Set([...a, ...b])]"

	def test_aggregate_with_seed(self):
		assert js("items.Aggregate(0, (acc, x) => acc + x)") == "items.reduce((acc, x) => acc + x, 0)"

	def test_order_by_sorts_a_copy(self):
		code = js("items.OrderBy(x => x.Name)")
		assert code == "[...items].sort(($a, $b) => $a.name < $b.name ? -1 : $a.name > $b.name ? 1 : 0)"

	def test_then_by_joins_the_sort(self):
		code = js("items.OrderBy(x => x.Age).ThenByDescending(x => x.Name)")
		assert code == (
			"[...items].sort(($a, $b) => "
			"($a.age < $b.age ? -1 : $a.age > $b.age ? 1 : 0) || "
			"($a.name < $b.name ? 1 : $a.name > $b.name ? -1 : 0))"
		)

	def test_group_by(self):
		code = js("users.GroupBy(u => u.Team)")
		assert code == (
			"[...Map.groupBy(users, (u) => u.team)]"
			".map(([key, items]) => Object.assign(items, {key: key}))"
		)

	def test_of_type(self):
		assert js("shapes.OfType<Circle>()") == "shapes.filter(($x) => $x instanceof Circle)"

	def test_to_dictionary(self):
		code = js("items.ToDictionary(x => x.Id)")
		assert code == "Object.fromEntries(items.map(($x) => [$x.id, $x]))"

	def test_to_hash_set(self):
		assert js("items.ToHashSet()") == "new Set(items)"

	def test_cast_keeps_the_sequence(self):
		assert js("items.Cast<int>()") == "items"

	def test_chain(self):
		code = js("items.Where(x => x.A).OrderBy(x => x.B).Select(x => x.C)")
		assert code == (
			"[...items.filter((x) => x.a)]"
			".sort(($a, $b) => $a.b < $b.b ? -1 : $a.b > $b.b ? 1 : 0)"
			".map((x) => x.c)"
		)

	def test_nested_where(self):
		code = js("groups.Select(g => g.Items.Where(i => i.Ok))")
		assert code == "groups.map((g) => g.items.filter((i) => i.ok))"

	def test_nested_sum_captures_outer_item(self):
		code = js("xs.Sum(x => x.Items.Sum(i => i.V * x.W))")
		assert code == "xs.reduce(($a, $b) => $a + $b.items.reduce(($a1, $b1) => $a1 + $b1.v * $b.w, 0), 0)"

	def test_conversion_is_repeatable(self):
		source = "xs.Sum(x => x.Items.Sum(i => i.V)) + ys.OrderBy(y => y.N).First().N"
		assert js(source) == js(source)


class TestEvaluatedOnce:
	"""Receivers and keys used more than once are computed once."""

	def test_average_of_call(self):
		assert js("GetItems().Average()") == (
			"(($v) => $v.reduce(($a, $b) => $a + $b, 0) / $v.length)(this.getItems())"
		)

	def test_average_of_plain_read(self):
		assert js("items.Average()") == "items.reduce(($a, $b) => $a + $b, 0) / items.length"

	def test_intersect_with_call(self):
		assert js("xs.Intersect(GetOther())") == (
			"(($v, $v1) => $v.filter(($x) => $v1.includes($x)))([...new Set(xs)], this.getOther())"
		)

	def test_order_by_computed_key(self):
		assert js("items.OrderBy(x => Score(x))") == (
			"[...items].sort(($a, $b) => "
			"(($v, $v1) => $v < $v1 ? -1 : $v > $v1 ? 1 : 0)(this.score($a), this.score($b)))"
		)

	def test_order_by_nested_query_key(self):
		assert js("groups.OrderBy(g => g.Items.Sum(i => i.V))") == (
			"[...groups].sort(($a, $b) => "
			"(($v, $v1) => $v < $v1 ? -1 : $v > $v1 ? 1 : 0)("
			"$a.items.reduce(($a1, $b1) => $a1 + $b1.v, 0), "
			"$b.items.reduce(($a1, $b1) => $a1 + $b1.v, 0)))"
		)


# =============================================================================
# Framework calls
# =============================================================================


class TestCalls:
	"""Console, Math, parsing, constants and service lookup."""

	def test_console_error(self):
		assert js("Console.Error.WriteLine(msg)") == "console.error(msg)"

	def test_debug(self):
		assert js("Debug.WriteLine(x)") == "console.debug(x)"

	def test_console_composite_format(self):
		assert js('Console.WriteLine("{0} items", n)') == "console.log(`${n} items`)"

	def test_math_methods(self):
		assert js("Math.Abs(x)") == "Math.abs(x)"
		assert js("Math.Ceiling(x)") == "Math.ceil(x)"

	def test_math_round_with_digits(self):
		assert js("Math.Round(x, 2)") == "Number(x.toFixed(2))"

	def test_math_constant(self):
		assert js("Math.PI * r") == "Math.PI * r"

	def test_parse(self):
		assert js("int.Parse(s)") == "parseInt(s)"
		assert js("double.Parse(s)") == "parseFloat(s)"

	def test_int_max_value(self):
		assert js("int.MaxValue") == "2147483647"

	def test_guid(self):
		assert js("Guid.NewGuid()") == "crypto.randomUUID()"

	def test_date_time_now(self):
		assert js("DateTime.Now") == "new Date()"

	def test_date_time_today(self):
		assert js("DateTime.Today") == "new Date(new Date().setHours(0, 0, 0, 0))"

	def test_date_parts(self):
		assert js("DateTime.Now.Year") == "new Date().getFullYear()"
		assert js("DateTimeOffset.UtcNow.Hour") == "new Date().getHours()"

	def test_month_is_one_based(self):
		assert js("DateTime.Now.Month") == "new Date().getMonth() + 1"

	def test_untyped_year_is_a_property(self):
		assert js("release.Year") == "release.year"

	def test_try_parse(self):
		assert js("int.TryParse(s, out n)") == "!Number.isNaN(n = parseInt(s))"
		assert js("double.TryParse(s, out d)") == "!Number.isNaN(d = parseFloat(s))"

	def test_array_lookups(self):
		assert js("Array.IndexOf(xs, v)") == "xs.indexOf(v)"
		assert js("Array.Exists(xs, x => x > 0)") == "xs.some((x) => x > 0)"
		assert js("Array.FindAll(xs, x => x.Ok)") == "xs.filter((x) => x.ok)"

	def test_array_empty(self):
		assert js("Array.Empty<int>()") == "[]"

	def test_array_sort(self):
		assert js("Array.Sort(xs)") == "xs.sort(($a, $b) => $a < $b ? -1 : $a > $b ? 1 : 0)"
		assert js("Array.Sort(xs, cmp)") == "xs.sort(cmp)"

	def test_array_resize(self):
		assert js("Array.Resize(ref xs, 3)") == "xs.length = 3"

	def test_convert(self):
		assert js("Convert.ToInt32(s)") == "Math.trunc(Number(s))"

	def test_to_string(self):
		assert js("count.ToString()") == "String(count)"

	def test_to_string_with_format(self):
		assert js('price.ToString("F2")') == "price.toFixed(2)"
		assert js('n.ToString("N0")') == (
			"n.toLocaleString(undefined, {minimumFractionDigits: 0, maximumFractionDigits: 0})"
		)

	def test_service_lookup(self):
		assert js("services.GetRequiredService<ILogger>()") == 'services.getService("ILogger")'


# =============================================================================
# Strings
# =============================================================================


class TestStrings:
	"""`string` members and statics."""

	def test_case(self):
		assert js("name.ToUpper()") == "name.toUpperCase()"
		assert js("name.ToLowerInvariant()") == "name.toLowerCase()"

	def test_replace_all(self):
		assert js('s.Replace("a", "b")') == 's.replaceAll("a", "b")'

	def test_substring_length(self):
		assert js("s.Substring(1, 3)") == "s.substring(1, 1 + 3)"

	def test_starts_with(self):
		assert js('s.StartsWith("a")') == 's.startsWith("a")'

	def test_is_null_or_empty(self):
		assert js("string.IsNullOrEmpty(s)") == "!s"

	def test_is_null_or_white_space(self):
		assert js("string.IsNullOrWhiteSpace(s)") == "!s?.trim()"

	def test_join(self):
		assert js('string.Join(", ", parts)') == 'parts.join(", ")'

	def test_format(self):
		assert js('string.Format("{0} of {1}", a, b)') == "`${a} of ${b}`"

	def test_empty(self):
		assert js("string.Empty") == '""'


# =============================================================================
# Collections
# =============================================================================


class TestCollections:
	"""Dictionary and list members on untyped receivers."""

	def test_contains_key(self):
		assert js('d.ContainsKey("a")') == '"a" in d'

	def test_get_value_or_default(self):
		assert js("d.GetValueOrDefault(k, 0)") == "d[k] ?? 0"

	def test_dictionary_add(self):
		assert js("d.Add(k, v)") == "d[k] = v"

	def test_keys(self):
		assert js("d.Keys") == "Object.keys(d)"

	def test_list_add(self):
		assert js("list.Add(item)") == "list.push(item)"

	def test_add_range(self):
		assert js("list.AddRange(more)") == "list.push(...more)"

	def test_remove_at(self):
		assert js("list.RemoveAt(0)") == "list.splice(0, 1)"


# =============================================================================
# Tasks
# =============================================================================


class TestTasks:
	"""`Task` helpers map onto promises."""

	def test_delay(self):
		assert js("Task.Delay(100)") == "new Promise((resolve) => setTimeout(resolve, 100))"

	def test_when_all(self):
		assert js("Task.WhenAll(a, b)") == "Promise.all([a, b])"

	def test_when_all_single_task(self):
		assert js("Task.WhenAll(LoadAsync())") == "Promise.all([this.loadAsync()])"
		assert js("Task.WhenAny(saveTask)") == "Promise.race([saveTask])"

	def test_when_all_collection(self):
		assert js("Task.WhenAll(tasks)") == "Promise.all(tasks)"
		assert js("Task.WhenAll(ids.Select(id => FetchAsync(id)))") == (
			"Promise.all(ids.map((id) => this.fetchAsync(id)))"
		)

	def test_from_result(self):
		assert js("Task.FromResult(1)") == "Promise.resolve(1)"

	def test_completed_task(self):
		assert js("Task.CompletedTask") == "Promise.resolve()"

	def test_run(self):
		assert js("Task.Run(() => Work())") == "Promise.resolve().then(() => this.work())"

	def test_configure_await_is_dropped(self):
		assert js("await LoadAsync().ConfigureAwait(false)") == "await this.loadAsync()"
