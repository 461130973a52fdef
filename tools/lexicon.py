"""Word lists used by the on-device text heuristics."""

# Function words: never themes, never names on their own.
STOPWORDS = frozenset("""
a about above after again against all also am an and any are as at be because been
before being below between both but by can could did do does doing done down during
each either else ever every few for from further had has have having he her here hers
herself him himself his how i if in into is it its itself just let lets me more most
much must my myself neither no nor not now of off on once only or other our ours
ourselves out over own same she should so some such than that the their theirs them
themselves then there these they this those through to too under until up upon us
very was we were what when where which while who whom whose why will with would yet
you your yours yourself yourselves
today tomorrow yesterday tonight really quite still even maybe perhaps always often
sometimes never again already almost enough lot lots thing things something anything
nothing everything someone anyone everyone somebody anybody nobody get got gets getting
went go goes going gone make makes made say said says tell told one two three four five
six seven eight nine ten first second third next last another many lot
""".split())

# Frequent descriptive words that the lexical-class filter would drop.
ADJECTIVES = frozenset("""
good bad great big small little large huge tiny new old young long short high low
happy sad angry scared afraid nervous excited proud tired hard easy fun funny nice
best better worse worst cool awesome amazing favorite favourite hot cold warm wet dry
fast slow loud quiet early late real sure able whole full empty same different
important special beautiful pretty ugly strong weak kind mean brave calm upset
difficult simple interesting boring confusing frustrating exciting wonderful terrible
""".split())

CALENDAR_WORDS = frozenset("""
monday tuesday wednesday thursday friday saturday sunday january february march april
may june july august september october november december
""".split())

NEGATORS = frozenset("""
not no never none nobody nothing neither nor cannot without hardly barely
""".split())

POSITIVE_WORDS = frozenset("""
happy glad joy joyful love loved loving liked enjoy enjoyed fun funny great good
awesome amazing wonderful excellent proud excited exciting best better nice kind
friend friends friendly laugh laughed smile smiled win won success successful
beautiful brave calm confident cool delighted easy favorite grateful thankful hope
hopeful helpful interesting learn learned safe strong super surprise fantastic
celebrate celebrated perfect relaxed cheerful
""".split())

NEGATIVE_WORDS = frozenset("""
sad unhappy angry mad upset hate hated bad worse worst terrible awful scared afraid
fear nervous worried worry anxious hurt pain cry cried lonely alone bored boring
difficult hard confused confusing frustrated frustrating fail failed failure lose lost
sick tired mean annoyed annoying disappointed embarrassed ugly wrong problem problems
fight fought stress stressed dark broken
""".split())

# Past tense / plural forms the suffix rules get wrong.
IRREGULAR_LEMMAS = {
    "went": "go", "gone": "go", "saw": "see", "seen": "see", "ran": "run", "was": "be",
    "were": "be", "is": "be", "are": "be", "been": "be", "did": "do", "done": "do",
    "made": "make", "took": "take", "taken": "take", "found": "find", "felt": "feel",
    "thought": "think", "brought": "bring", "bought": "buy", "caught": "catch",
    "taught": "teach", "began": "begin", "begun": "begin", "came": "come", "became": "become",
    "gave": "give", "given": "give", "knew": "know", "known": "know", "wrote": "write",
    "written": "write", "rode": "ride", "ridden": "ride", "ate": "eat", "eaten": "eat",
    "drew": "draw", "drawn": "draw", "flew": "fly", "flown": "fly", "sang": "sing",
    "sung": "sing", "swam": "swim", "swum": "swim", "won": "win", "lost": "lose",
    "told": "tell", "said": "say", "built": "build", "sent": "send", "spent": "spend",
    "left": "leave", "met": "meet", "kept": "keep", "slept": "sleep", "read": "read",
    "children": "child", "people": "person", "men": "man", "women": "woman", "mice": "mouse",
    "feet": "foot", "teeth": "tooth", "geese": "goose", "leaves": "leaf", "wolves": "wolf",
    "lives": "life", "knives": "knife", "stories": "story", "movies": "movie",
    "cookies": "cookie", "goalies": "goalie",
}

# Stems that lost a silent 'e' when -ing/-ed was added.
E_RESTORE_STEMS = frozenset("""
mak hav giv tak writ rid hop danc bak smil shar decid creat us lov liv mov com becom
sav explor imagin practic promis scor skat surpris argu rac chas hik slid shin wav
bik driv arriv believ chang clos compar continu describ dislik escap excit
includ invit jok lik notic plac prepar produc receiv remov serv solv stor trad
""".split())
